# provide dataclass models

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    is_admin: int  # 0 or 1

    def public(self) -> Dict[str, Any]:
        """The shape returned by the login/register endpoints."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "is_admin": self.is_admin,
        }


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: str  # free text, e.g. "$39.00"
    img: str
    tag: str


@dataclass(frozen=True)
class Order:
    id: int
    email: str
    items: List[Dict[str, Any]] = field(default_factory=list)
    total: float = 0.0
    created_at: str = ""
