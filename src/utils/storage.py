import json
import os
from typing import Dict, Optional

from utils.logger import get_logger

_logger = get_logger(__name__)

SESSION_KEY = "user_v1"
CART_KEY = "cart_v1"


class LocalStorage:
    """
    Durable key -> string store kept in a single JSON file.

    Values are opaque strings (callers store serialized JSON in them).
    A missing or unreadable file reads as empty. There is no locking:
    two processes sharing a file race, last write wins.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _logger.debug(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def __contains__(self, key: str) -> bool:
        return key in self._load()

