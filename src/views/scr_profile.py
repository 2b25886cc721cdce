from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Label, Markdown

from utils.messages import UserLoginMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import confirm
from views.scr_login import LoginScreen


class ProfileScreen(BaseScreen):
    """
    Account details of the signed-in user. Asks for a sign-in when nobody is.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-profile"):
            yield Label("", id="label-initials")
            yield Markdown("", id="md-profile")
            yield Label(
                "Order history is recorded server-side and not fetched here.",
                id="label-orders-hint",
            )
            yield Button("Log out", id="btn-profile-logout", variant="error")

    async def on_mount(self) -> None:
        await self.render_profile()

    @on(ScreenResume)
    async def handle_resume(self) -> None:
        await self.render_profile()

    async def render_profile(self) -> None:
        identity = self.app.state.session.identity
        if identity is None:
            self.require_login()
            return
        self.query_one("#label-initials", Label).update(identity.initials)
        md = generate_markdown_table(
            ["Account", ""],
            [["Name", identity.name], ["Email", identity.email]],
            ["l", "l"],
        )
        await self.query_one("#md-profile", Markdown).update(md)

    @work(exclusive=True)
    async def require_login(self) -> None:
        if await self.app.push_screen_wait(LoginScreen()):
            self.app.post_message(UserLoginMessage())
        else:
            await self.app.go_to(self.app.LANDING_MODE)

    @on(Button.Pressed, "#btn-profile-logout")
    @work()
    async def handle_logout(self) -> None:
        if await self.app.push_screen_wait(confirm("Are you sure you want to log out?")):
            self.app.post_message(UserLogoutMessage())
