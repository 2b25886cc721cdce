import asyncio

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from views.base_screen import BaseScreen

REDIRECT_DELAY = 0.9


class LoginScreen(BaseScreen):
    """
    Sign in / sign up. Dismisses with True once signed in, False if abandoned.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Sign in", show_sidebar=False)
        self._registration = self.app.state.registration()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="you@example.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="Enter your password",
                        password=True,
                        id="input-login-pwd",
                    )
                    yield Label("", id="label-login-error", classes="form-error")
                    with Horizontal(id="div-login-btns"):
                        yield Button("Back", id="btn-back")
                        yield Button("Sign in", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Full name")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Email")
                    yield Input(placeholder="you@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="Create a password",
                        password=True,
                        id="input-reg-pwd",
                    )
                    yield Label("Confirm password")
                    yield Input(
                        placeholder="Repeat password",
                        password=True,
                        id="input-reg-confirm",
                    )
                    yield Label("", id="label-reg-error", classes="form-error")
                    yield Label("", id="label-reg-success", classes="form-success")
                    with Horizontal(id="div-reg-btns"):
                        yield Button("Create account", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(False)
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        if event.key == "enter" and self.focused == self.query_one(
            "#input-reg-confirm"
        ):
            self.handle_registration_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        session = self.app.state.session
        email = self.query_one("#input-login-email", Input).value
        pwd = self.query_one("#input-login-pwd", Input).value
        error_label = self.query_one("#label-login-error", Label)
        button = self.query_one("#btn-login", Button)

        error_label.update("")
        button.disabled = True
        button.label = "Signing in..."
        try:
            ok = await session.login(email, pwd)
        finally:
            button.disabled = False
            button.label = "Sign in"

        if ok:
            self.notify(f"Hello {session.identity.name}!")
            self.dismiss(True)
        else:
            error_label.update(session.error or "")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        form = self._registration
        name = self.query_one("#input-reg-name", Input).value
        email = self.query_one("#input-reg-email", Input).value
        pwd = self.query_one("#input-reg-pwd", Input).value
        confirm = self.query_one("#input-reg-confirm", Input).value

        ok = await form.submit(name, email, pwd, confirm)
        self.query_one("#label-reg-error", Label).update(form.error or "")
        self.query_one("#label-reg-success", Label).update(form.success or "")
        if not ok:
            return

        for input_id in ("#input-reg-name", "#input-reg-email", "#input-reg-pwd", "#input-reg-confirm"):
            self.query_one(input_id, Input).value = ""

        # let the success message show before moving to the sign-in tab
        await asyncio.sleep(REDIRECT_DELAY)
        self.query_one(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = email
        self.query_one("#input-login-pwd", Input).focus()
        self.query_one("#label-reg-success", Label).update("")

    @on(Button.Pressed, "#btn-back")
    def handle_back(self) -> None:
        self.dismiss(False)
