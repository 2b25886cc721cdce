from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import UserLogoutMessage
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import QuitDialogModal, confirm


class Sidebar(Container):
    """User info, cart badge, sign in/out and the menu of reachable views."""

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Label("", id="label-cart-badge")
        yield Button("Log in", id="btn-login", variant="primary")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        await self.populate()

    async def populate(self) -> None:
        state = self.app.state
        identity = state.session.identity

        if identity:
            table_rows = [
                ["Name", identity.name],
                ["Email", identity.email],
                ["Role", "Admin" if identity.is_admin else "Customer"],
            ]
        else:
            table_rows = [["Status", "Not signed in"]]
        md_table_str = generate_markdown_table(["", ""], table_rows, ["l", "l"])
        await self.query_one("#md-userinfo", Markdown).update(md_table_str)

        self.query_one("#btn-login").display = identity is None
        self.query_one("#btn-logout").display = identity is not None
        self.update_cart_badge()

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.visible_modes().items()
            ]
        )
        self.highlight_item(self.app.current_mode)

    def update_cart_badge(self, count: Optional[int] = None) -> None:
        cart = self.app.state.cart
        if count is None:
            count = cart.count()
        self.query_one("#label-cart-badge", Label).update(
            f"Cart: {count} items ({format_money(cart.total())})"
        )

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.app.current_mode)
        if self.app.current_mode != selected_mode:
            await self.app.go_to(selected_mode)

    @on(Button.Pressed, "#btn-login")
    def handle_login(self):
        self.app.action_login()

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            confirm("Are you sure you want to log out?")
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Best Shop",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """

        # auto gen subtitles from the mode tables
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.MODE_TITLES.get(k, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(ScreenResume)
    async def refresh_sidebar(self) -> None:
        for sidebar in self.query(Sidebar):
            await sidebar.populate()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
