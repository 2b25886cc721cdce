from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.widgets import Button, Input, Label, Rule

from state.models import CartItem
from utils.messages import CartChangedMessage
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import confirm


class CartItemWidget(HorizontalGroup):
    """One cart line: name, unit price, editable quantity, remove."""

    def __init__(self, item: CartItem):
        super().__init__(classes="cart-item")
        self.item = item

    def compose(self):
        yield Label(self.item.name, classes="label-item-name")
        yield Label(self.item.price, classes="label-item-price")
        yield Input(
            str(self.item.qty),
            type="integer",
            id=f"input-qty-{self.item.id}",
            classes="input-item-qty",
        )
        yield Button("Remove", id=f"btn-remove-{self.item.id}", variant="error")

    def on_input_changed(self, message: Input.Changed) -> None:
        message.stop()
        # the field never goes below one; removing is the Remove button's job
        try:
            qty = max(1, int(message.value))
        except ValueError:
            qty = 1
        if qty == self.item.qty:
            return
        self.app.state.cart.change_quantity(self.item.id, qty)
        self.post_message(CartChangedMessage(self.app.state.cart.count()))

    @on(Button.Pressed)
    def handle_remove_pressed(self, event: Button.Pressed):
        event.stop()
        self.remove_item()

    @work()
    async def remove_item(self):
        if not await self.app.push_screen_wait(
            confirm("Do you really want to remove this item from cart?")
        ):
            return
        self.app.state.cart.remove(self.item.id)
        self.post_message(CartChangedMessage(self.app.state.cart.count()))
        self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    Cart lines, running total, clear and checkout.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    async def on_mount(self):
        await self.rebuild()

    @on(ScreenResume)
    async def handle_resume(self):
        await self.rebuild()

    async def rebuild(self) -> None:
        """Re-render every line from the cart state."""
        cart = self.app.state.cart
        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(item) for item in cart.items])
        if not cart.items:
            await content.mount(Label("Your cart is empty.", id="label-empty-cart"))
        self.update_total()

    def update_total(self) -> None:
        cart = self.app.state.cart
        self.query_one("#label-cart-total", Label).update(
            f"{cart.count()} items | Total: {format_money(cart.total())}"
        )

    @on(CartChangedMessage)
    async def handle_cart_change(self):
        # quantity edits keep their widgets so the input keeps focus
        shown = {w.item.id for w in self.query(CartItemWidget)}
        current = {it.id for it in self.app.state.cart.items}
        if shown != current:
            await self.rebuild()
        else:
            self.update_total()

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if self.app.state.cart.is_empty():
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(
            confirm("Do you really want to remove all items from cart?", tone="error")
        ):
            self.app.state.cart.clear()
            self.post_message(CartChangedMessage(self.app.state.cart.count()))

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        """
        Open the checkout modal when the checkout flow allows it.
        Refusals (empty cart, not signed in) surface as notices.
        """
        if not self.app.state.checkout.open():
            return

        await self.app.push_screen_wait(CheckoutModal())
        self.post_message(CartChangedMessage(self.app.state.cart.count()))
