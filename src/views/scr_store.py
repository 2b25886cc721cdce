from typing import Any, Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.widgets import DataTable, Input, Label

from client.errors import ApiError
from utils.messages import CartChangedMessage
from utils.pure import filter_products
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal


class StoreScreen(BaseScreen):
    """
    Public storefront: product list with a search filter and quick view.
    """

    BINDINGS = [
        Binding("enter", "noop", "Quick View", show=True, key_display="⏎"),
        Binding("ctrl+a", "add_selected", "Add to Cart", show=True),
        Binding("ctrl+r", "reload", "Reload", show=True),
    ]

    query_str = reactive("")

    def __init__(self):
        super().__init__()
        self._products: List[Dict[str, Any]] = []
        self._shown: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(id="input-search", placeholder="Search products...")
        yield Label("", id="label-store-status")
        yield DataTable(id="table-products")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Price", "Tag")

        self.query_one("#input-search").focus()
        self.load_products()

    def action_noop(self) -> None:
        pass

    def action_reload(self) -> None:
        self.load_products()

    @work(exclusive=True)
    async def load_products(self) -> None:
        status = self.query_one("#label-store-status", Label)
        status.update("Loading products...")
        try:
            self._products = await self.app.state.client.list_products()
        except ApiError:
            self._products = []
            status.update("Unable to load products. Try again later.")
            self.render_table()
            return
        status.update("")
        self.render_table()

    def render_table(self) -> None:
        self._shown = filter_products(self._products, self.query_str)
        table = self.query_one(DataTable)
        table.clear()
        for p in self._shown:
            table.add_row(p["id"], p["name"], p["price"], p.get("tag") or "", key=str(p["id"]))

        if self._products and not self._shown:
            self.query_one("#label-store-status", Label).update(
                "No products match your search."
            )

    def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "input-search":
            self.query_one("#label-store-status", Label).update("")
            self.query_str = message.value
            self.render_table()

    def on_key(self, event) -> None:
        search = self.query_one("#input-search", Input)
        if event.key == "escape" and self.focused == search and search.value:
            search.value = ""

    def _selected_product(self) -> Dict[str, Any] | None:
        table = self.query_one(DataTable)
        if not self._shown or table.cursor_row is None:
            return None
        if 0 <= table.cursor_row < len(self._shown):
            return self._shown[table.cursor_row]
        return None

    def action_add_selected(self) -> None:
        product = self._selected_product()
        if product is None:
            return
        self.app.state.cart.add(product)
        self.post_message(CartChangedMessage(self.app.state.cart.count()))

    @on(DataTable.RowSelected)
    @work()
    async def handle_quick_view(self, event: DataTable.RowSelected) -> None:
        pid = int(event.row_key.value)
        product = next((p for p in self._shown if p["id"] == pid), None)
        if product is None:
            return
        outcome = await self.app.push_screen_wait(ProdDetailModal(product))
        if outcome in ("added", "view_cart"):
            self.post_message(CartChangedMessage(self.app.state.cart.count()))
        if outcome == "view_cart":
            await self.app.go_to("cart")
