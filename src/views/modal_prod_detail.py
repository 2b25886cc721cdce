from typing import Any, Dict

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from utils.pure import generate_markdown_table


class ProdDetailModal(ModalScreen[str]):
    """
    Quick view of one product, plus add-to-cart.
    Dismisses with "added", "view_cart" or "" (closed without change).
    """

    CSS = """
    #input-order-qty {
        width: 10;
    }
    #btn-sub-qty {
        min-width: 4
    }
    #btn-add-qty {
        min-width: 4
    }
    """

    BINDINGS = [("escape", "close", "Close")]

    order_qty = reactive(1)

    def __init__(self, product: Dict[str, Any]) -> None:
        super().__init__()
        self._product = product

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(
                        value="1",
                        id="input-order-qty",
                        type="integer",
                        validators=[Number(minimum=1)],
                    )
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("View Cart", id="btn-view-cart")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        p = self._product
        table_rows = [
            ["Name", p.get("name", "")],
            ["Price", p.get("price", "")],
            ["Tag", p.get("tag") or "-"],
            ["Image", p.get("img") or "-"],
        ]
        md_table_str = generate_markdown_table(
            ["Attribute", "Value"], table_rows, ["l", "l"]
        )
        header_md = f"### {p.get('name', '')}\n\n"
        await self.query_one(MarkdownViewer).document.update(header_md + md_table_str)
        self.query_one("#input-order-qty").focus()

    def action_close(self) -> None:
        self.dismiss("")

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int) -> None:
        self.query_one("#btn-sub-qty").disabled = qty <= 1
        qty_input = self.query_one("#input-order-qty", Input)
        if qty_input.value != str(qty):
            qty_input.value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty = max(1, self.order_qty - 1)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss("")

    @on(Button.Pressed, "#btn-view-cart")
    def handle_view_cart(self):
        self.dismiss("view_cart")

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        self.app.state.cart.add(self._product, self.order_qty)
        self.dismiss("added")
