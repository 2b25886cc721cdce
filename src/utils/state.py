from __future__ import annotations

from typing import Callable, Optional

from client.shop_client import ShopClient
from state.cart import CartState
from state.checkout import CheckoutFlow
from state.notice import NoticeBoard
from state.session import RegistrationForm, SessionState
from utils import config
from utils.storage import LocalStorage


class AppState:
    """
    Application state handed to every screen.

    Owns two independently persisted sub-states, `session` and `cart`,
    plus the checkout flow that reads both. The only coupling between
    session and cart is that checkout needs a session email.
    """

    def __init__(
        self,
        storage: Optional[LocalStorage] = None,
        client: Optional[ShopClient] = None,
        on_notice: Optional[Callable[[str], None]] = None,
        success_delay: Optional[float] = None,
    ) -> None:
        self.storage = storage or LocalStorage(config.STORAGE_PATH)
        self.client = client or ShopClient()
        self.notices = NoticeBoard(ttl=config.NOTICE_SECONDS, listener=on_notice)

        self.session = SessionState(self.storage, self.client)
        self.cart = CartState(self.storage, self.notices)
        self.checkout = CheckoutFlow(
            self.cart,
            self.session,
            self.client,
            self.notices,
            success_delay=(
                config.CHECKOUT_SUCCESS_DELAY if success_delay is None else success_delay
            ),
        )

    def registration(self) -> RegistrationForm:
        return RegistrationForm(self.client)

    def can_access_dashboard(self) -> bool:
        return self.session.can_access_dashboard()

    async def aclose(self) -> None:
        await self.client.aclose()
