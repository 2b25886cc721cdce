from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, Optional

from client.errors import NetworkError, RequestRejected
from client.shop_client import ShopClient
from state.cart import CartState
from state.notice import NoticeBoard
from state.session import NETWORK_ERROR, SessionState
from utils.logger import get_logger

_logger = get_logger(__name__)


class CheckoutStatus(Enum):
    IDLE = "idle"
    OPENING = "opening"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CheckoutFlow:
    """
    Checkout state machine.

    IDLE -> OPENING -> AWAITING_CONFIRMATION -> SUBMITTING -> SUCCEEDED | FAILED

    A failed submission lands back in AWAITING_CONFIRMATION with `error`
    set and the cart untouched. A successful one holds SUCCEEDED for
    `success_delay` seconds, then empties and purges the cart and returns
    to IDLE.
    """

    def __init__(
        self,
        cart: CartState,
        session: SessionState,
        client: ShopClient,
        notices: NoticeBoard,
        success_delay: float = 0.9,
    ) -> None:
        self.cart = cart
        self.session = session
        self._client = client
        self._notices = notices
        self.success_delay = success_delay

        self.status = CheckoutStatus.IDLE
        self.email = ""
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self.order_id: Optional[int] = None
        # called after every transition, e.g. to redraw a view
        self.listener: Optional[Callable[[CheckoutStatus], None]] = None

    def _transition(self, status: CheckoutStatus) -> None:
        _logger.debug(f"checkout: {self.status.value} -> {status.value}")
        self.status = status
        if self.listener:
            self.listener(status)

    @property
    def is_open(self) -> bool:
        return self.status not in (CheckoutStatus.IDLE, CheckoutStatus.OPENING)

    @property
    def email_locked(self) -> bool:
        return self.session.identity is not None

    def set_email(self, email: str) -> None:
        if not self.email_locked:
            self.email = email

    def open(self) -> bool:
        if self.status != CheckoutStatus.IDLE:
            return self.is_open

        self._transition(CheckoutStatus.OPENING)
        if self.cart.is_empty():
            self._notices.post("Cart is empty")
            self._transition(CheckoutStatus.IDLE)
            return False
        if not self.session.email:
            self._notices.post("You must be logged in to checkout")
            self.error = "Please sign in to continue"
            self._transition(CheckoutStatus.IDLE)
            return False

        self.error = None
        self.success = None
        self.order_id = None
        self.email = self.session.email
        self._transition(CheckoutStatus.AWAITING_CONFIRMATION)
        return True

    def cancel(self) -> bool:
        if self.status in (CheckoutStatus.AWAITING_CONFIRMATION, CheckoutStatus.OPENING):
            self._transition(CheckoutStatus.IDLE)
            return True
        return False

    def build_payload(self) -> Dict[str, Any]:
        return {
            "email": self.session.email or self.email,
            "items": [
                {"id": it.id, "name": it.name, "price": it.price, "qty": it.qty}
                for it in self.cart.items
            ],
            "total": self.cart.total(),
        }

    def _fail(self, message: str) -> None:
        self.error = message
        self._transition(CheckoutStatus.FAILED)
        self._transition(CheckoutStatus.AWAITING_CONFIRMATION)

    async def submit(self) -> bool:
        """Send the order. Refused unless awaiting confirmation."""
        if self.status != CheckoutStatus.AWAITING_CONFIRMATION:
            return False
        self.error = None
        if not self.session.email:
            self.error = "You must be logged in to checkout"
            return False

        self._transition(CheckoutStatus.SUBMITTING)
        try:
            created = await self._client.place_order(self.build_payload())
        except RequestRejected as e:
            self._fail(e.text or "Checkout failed")
            return False
        except NetworkError:
            self._fail(NETWORK_ERROR)
            return False

        self.order_id = created.get("id") if isinstance(created, dict) else None
        self.success = "Order recorded. Thank you!"
        self._transition(CheckoutStatus.SUCCEEDED)
        _logger.info(f"Order {self.order_id} placed for {self.session.email}")

        # the order is recorded; the cart goes even if the hold is cut short
        try:
            await asyncio.sleep(self.success_delay)
        finally:
            self.cart.purge()
            self.email = ""
            self._transition(CheckoutStatus.IDLE)
        return True
