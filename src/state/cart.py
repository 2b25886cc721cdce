from __future__ import annotations

from typing import Any, List, Optional

from pydantic import ValidationError

from state.models import CART_ADAPTER, CartItem
from state.notice import NoticeBoard
from utils.logger import get_logger
from utils.pure import price_value
from utils.storage import CART_KEY, LocalStorage

_logger = get_logger(__name__)


def _get(product: Any, name: str, default=None):
    if isinstance(product, dict):
        return product.get(name, default)
    return getattr(product, name, default)


class CartState:
    """
    Pending line items of the browsing client.

    The whole cart is written to storage after every mutation and read
    back once, here in the constructor. A corrupt or missing stored value
    is an empty cart.
    """

    def __init__(
        self, storage: LocalStorage, notices: Optional[NoticeBoard] = None
    ) -> None:
        self._storage = storage
        self._notices = notices
        self.items: List[CartItem] = self._rehydrate()

    def _rehydrate(self) -> List[CartItem]:
        raw = self._storage.get_item(CART_KEY)
        if not raw:
            return []
        try:
            return CART_ADAPTER.validate_json(raw)
        except ValidationError as e:
            _logger.debug(f"Discarding unreadable stored cart: {e.error_count()} errors")
            return []

    def _persist(self) -> None:
        self._storage.set_item(CART_KEY, CART_ADAPTER.dump_json(self.items).decode())

    def find(self, pid: int) -> Optional[CartItem]:
        return next((it for it in self.items if it.id == pid), None)

    # ---------------------------
    # Mutations
    # ---------------------------

    def add(self, product: Any, qty: int = 1) -> None:
        """
        Add `qty` of a product (dataclass, model or dict with id/name/price/img).
        An existing line for the same product id has its quantity increased.
        """
        pid = int(_get(product, "id"))
        existing = self.find(pid)
        if existing:
            existing.qty = max(1, existing.qty + qty)
        else:
            self.items.append(
                CartItem(
                    id=pid,
                    name=_get(product, "name", ""),
                    price=str(_get(product, "price", "")),
                    img=_get(product, "img"),
                    qty=qty,
                )
            )
        self._persist()
        if self._notices:
            self._notices.post(f"{_get(product, 'name', '')} added to cart")

    def change_quantity(self, pid: int, qty: int) -> None:
        if qty <= 0:
            self.remove(pid)
            return
        item = self.find(pid)
        if item:
            item.qty = qty
            self._persist()

    def remove(self, pid: int) -> None:
        before = len(self.items)
        self.items = [it for it in self.items if it.id != pid]
        if len(self.items) != before:
            self._persist()

    def clear(self) -> None:
        self.items = []
        self._persist()

    def purge(self) -> None:
        """Empty the cart and drop it from durable storage altogether."""
        self.items = []
        self._storage.remove_item(CART_KEY)

    # ---------------------------
    # Derived values
    # ---------------------------

    def total(self) -> float:
        return sum(price_value(it.price) * it.qty for it in self.items)

    def count(self) -> int:
        return sum(it.qty for it in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def __len__(self) -> int:
        return len(self.items)
