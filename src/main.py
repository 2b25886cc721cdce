from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils import config
from utils.logger import get_logger
from utils.messages import (
    CartChangedMessage,
    OrderPlacedMessage,
    QuitRequestedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.state import AppState
from views.base_screen import Sidebar
from views.scr_cart import CartScreen
from views.scr_dashboard import DashboardScreen
from views.scr_login import LoginScreen
from views.scr_profile import ProfileScreen
from views.scr_store import StoreScreen

_logger = get_logger(__name__)


class ShopApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
        Binding("ctrl+l", "login", "Log in", show=True),
    ]

    MODES = {
        "store": StoreScreen,
        "cart": CartScreen,
        "profile": ProfileScreen,
        "dashboard": DashboardScreen,
    }

    PUBLIC_MODES = {"store": "Store", "cart": "Cart"}
    USER_MODES = {"profile": "Profile"}
    ADMIN_MODES = {"dashboard": "Admin Dashboard"}
    MODE_TITLES = {**PUBLIC_MODES, **USER_MODES, **ADMIN_MODES}

    LANDING_MODE = "store"

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/store.tcss",
        "styles/cart.tcss",
        "styles/dashboard.tcss",
    ]

    state: AppState

    def __init__(self, state: AppState | None = None):
        super().__init__()
        self.title = "Best Shop"
        self.state = state or AppState(on_notice=self.show_notice)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        await self.go_to(self.LANDING_MODE)

    def show_notice(self, text: str) -> None:
        self.notify(text, timeout=config.NOTICE_SECONDS)

    def visible_modes(self) -> dict:
        """Menu entries for the current identity."""
        modes = dict(self.PUBLIC_MODES)
        if self.state.session.identity:
            modes.update(self.USER_MODES)
        if self.state.can_access_dashboard():
            modes.update(self.ADMIN_MODES)
        return modes

    async def go_to(self, mode: str) -> None:
        """
        Switch view. Admin views fall back to the landing view unless the
        signed-in identity is an admin; the server checks again on its own.
        """
        if mode in self.ADMIN_MODES and not self.state.can_access_dashboard():
            mode = self.LANDING_MODE
        if self.current_mode != mode:
            await self.switch_mode(mode)

    async def refresh_sidebars(self) -> None:
        for sidebar in self.screen.query(Sidebar):
            await sidebar.populate()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work
    async def action_login(self):
        if self.state.session.identity:
            self.notify("Already signed in.")
            return
        if await self.push_screen_wait(LoginScreen()):
            self.post_message(UserLoginMessage())

    @on(UserLoginMessage)
    async def handle_user_login(self):
        await self.refresh_sidebars()
        # admins land on the dashboard, everyone else is bounced to the store
        await self.go_to("dashboard")

    @on(UserLogoutMessage)
    async def handle_user_logout(self):
        self.state.session.logout()
        self.notify("Logout successful.")
        await self.go_to(self.LANDING_MODE)
        await self.refresh_sidebars()

    @on(CartChangedMessage)
    def handle_cart_changed(self, message: CartChangedMessage):
        for sidebar in self.screen.query(Sidebar):
            sidebar.update_cart_badge(message.count)

    @on(OrderPlacedMessage)
    def handle_order_placed(self, message: OrderPlacedMessage):
        _logger.info(f"Order {message.order_id} confirmed to the user")
        self.notify(f"Order placed. Your order number is {message.order_id}.")

    @on(QuitRequestedMessage)
    async def handle_quit(self):
        await self.state.aclose()
        self.exit()


def run() -> None:
    ShopApp().run()


if __name__ == "__main__":
    run()
