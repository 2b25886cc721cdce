from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from state.checkout import CheckoutFlow, CheckoutStatus
from utils.messages import OrderPlacedMessage
from utils.pure import format_money, generate_markdown_table, price_value


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary and confirmation, driven by the app's CheckoutFlow.
    Dismisses with True once the order is recorded, False on cancel.
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    @property
    def flow(self) -> CheckoutFlow:
        return self.app.state.checkout

    def compose(self) -> ComposeResult:
        with Vertical(id="div-checkout"):
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Email")
            yield Input(placeholder="you@example.com", id="input-checkout-email")
            yield Label("", id="label-checkout-hint")
            yield Label("", id="label-checkout-error")
            yield Label("", id="label-checkout-success")
            with Horizontal():
                yield Button("Cancel", id="btn-cancel")
                yield Button("Confirm purchase", id="btn-submit", variant="primary")

    async def on_mount(self):
        cart = self.flow.cart
        headers = ["Product", "Unit Price", "Quantity", "Line Total"]
        rows = [
            [it.name, it.price, it.qty, format_money(price_value(it.price) * it.qty)]
            for it in cart.items
        ]
        md = "### Order Summary\n\n"
        md += generate_markdown_table(headers, rows, ["l", "c", "c", "r"])
        md += f"\n\n**Total:** {format_money(cart.total())}"
        await self.query_one(MarkdownViewer).document.update(md)

        email_input = self.query_one("#input-checkout-email", Input)
        email_input.value = self.flow.email
        if self.flow.email_locked:
            email_input.disabled = True
            self.query_one("#label-checkout-hint", Label).update(
                "Order will be recorded for this email"
            )
        self.render_status()
        self.query_one("#btn-submit").focus()

    def render_status(self) -> None:
        flow = self.flow
        self.query_one("#label-checkout-error", Label).update(flow.error or "")
        self.query_one("#label-checkout-success", Label).update(flow.success or "")

        submit = self.query_one("#btn-submit", Button)
        busy = flow.status in (CheckoutStatus.SUBMITTING, CheckoutStatus.SUCCEEDED)
        submit.disabled = busy
        submit.label = (
            "Processing..." if flow.status == CheckoutStatus.SUBMITTING else "Confirm purchase"
        )
        self.query_one("#btn-cancel", Button).disabled = busy

    def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "input-checkout-email":
            self.flow.set_email(message.value)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        # the flow holds SUCCEEDED for a moment before closing; show it meanwhile
        self.flow.listener = lambda _status: self.is_mounted and self.render_status()
        try:
            placed = await self.flow.submit()
        finally:
            self.flow.listener = None

        if placed:
            self.app.post_message(OrderPlacedMessage(self.flow.order_id))
            self.dismiss(True)
        else:
            self.render_status()

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self):
        self.action_cancel()

    def action_cancel(self) -> None:
        if self.flow.cancel():
            self.dismiss(False)
