from __future__ import annotations

from typing import Any, Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer

from client.errors import ApiError, NetworkError, RequestRejected
from utils.logger import get_logger
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import confirm

_logger = get_logger(__name__)

FORM_FIELDS = ("name", "price", "tag", "img")


def orders_markdown(orders: List[Dict[str, Any]]) -> str:
    """Render the order list as markdown, one table per order."""
    if not orders:
        return "### Orders\n\nNo orders yet."
    parts = ["### Orders"]
    for o in orders:
        parts.append(
            f"**#{o.get('id')}** {o.get('email', '')} | "
            f"{format_money(float(o.get('total') or 0))} | {o.get('created_at') or '-'}"
        )
        items = o.get("items") if isinstance(o.get("items"), list) else []
        if items:
            rows = [
                [it.get("name", ""), it.get("price") or "", it.get("qty") or ""]
                for it in items
                if isinstance(it, dict)
            ]
            parts.append(generate_markdown_table(["Item", "Price", "Qty"], rows, ["l", "r", "c"]))
        else:
            parts.append("_no items_")
    return "\n\n".join(parts)


class DashboardScreen(BaseScreen):
    """
    Admin dashboard: create, edit and delete products, browse orders.

    Reaching this screen is gated client-side by the session's admin flag;
    each request separately carries the admin header, which the server
    checks on its own.
    """

    BINDINGS = [
        Binding("ctrl+n", "new_product", "New", show=True),
        Binding("delete", "delete_product", "Delete Product", show=True),
    ]

    editing_id: Optional[int] = None

    def __init__(self) -> None:
        super().__init__()
        self._products: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-dashboard"):
            yield Label("Create product", id="label-form-title")
            with Horizontal(id="hort-product-form"):
                yield Input(placeholder="Name", id="input-name")
                yield Input(placeholder="Price, e.g. $19.99", id="input-price")
                yield Input(placeholder="Tag", id="input-tag")
            yield Input(placeholder="Image URL", id="input-img")
            with Horizontal(id="hort-form-buttons"):
                yield Button("New", id="btn-new")
                yield Button("Refresh orders", id="btn-refresh-orders")
                yield Button("Delete", id="btn-delete", variant="error")
                yield Button("Save", id="btn-save", variant="success")
            yield DataTable(id="table-admin-products")
            yield MarkdownViewer(id="md-orders", show_table_of_contents=False)

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Price", "Tag")

    @on(ScreenResume)
    async def handle_resume(self) -> None:
        if not self.app.state.can_access_dashboard():
            await self.app.go_to(self.app.LANDING_MODE)
            return
        self.load_products()
        self.load_orders()

    @property
    def _admin(self) -> bool:
        return self.app.state.session.is_admin

    def _report(self, action: str, e: ApiError) -> None:
        if isinstance(e, RequestRejected):
            message = e.text or f"{action} failed"
        elif isinstance(e, NetworkError):
            message = "Network error. Please try again."
        else:
            message = f"{action} failed"
        _logger.warning(f"{action} failed: {e}")
        self.notify(message, severity="error")

    # ---------------------------
    # Loading
    # ---------------------------

    @work(exclusive=True, group="products")
    async def load_products(self) -> None:
        try:
            self._products = await self.app.state.client.list_products()
        except ApiError as e:
            self._report("Loading products", e)
            return
        table = self.query_one(DataTable)
        table.clear()
        for p in self._products:
            table.add_row(p["id"], p["name"], p["price"], p.get("tag") or "", key=str(p["id"]))

    @work(exclusive=True, group="orders")
    async def load_orders(self) -> None:
        viewer = self.query_one("#md-orders", MarkdownViewer)
        try:
            orders = await self.app.state.client.list_orders(admin=self._admin)
        except ApiError as e:
            _logger.info(f"Orders unavailable: {e}")
            orders = []
        await viewer.document.update(orders_markdown(orders))

    @on(Button.Pressed, "#btn-refresh-orders")
    def handle_refresh_orders(self) -> None:
        self.load_orders()

    # ---------------------------
    # Form
    # ---------------------------

    def _form_values(self) -> Dict[str, str]:
        return {f: self.query_one(f"#input-{f}", Input).value.strip() for f in FORM_FIELDS}

    def _fill_form(self, product: Optional[Dict[str, Any]]) -> None:
        for f in FORM_FIELDS:
            self.query_one(f"#input-{f}", Input).value = (product or {}).get(f) or ""
        self.editing_id = product["id"] if product else None
        self.query_one("#label-form-title", Label).update(
            "Edit product" if product else "Create product"
        )

    def action_new_product(self) -> None:
        self._fill_form(None)

    @on(Button.Pressed, "#btn-new")
    def handle_new(self) -> None:
        self.action_new_product()

    @on(DataTable.RowSelected)
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        pid = int(event.row_key.value)
        product = next((p for p in self._products if p["id"] == pid), None)
        self._fill_form(product)

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True, group="save")
    async def handle_save(self) -> None:
        values = self._form_values()
        if not values["name"] or not values["price"]:
            self.notify("Name and price are required.", severity="error")
            return

        client = self.app.state.client
        try:
            if self.editing_id:
                await client.update_product(self.editing_id, values, admin=self._admin)
                self.notify("Product updated.")
            else:
                await client.create_product(values, admin=self._admin)
                self.notify("Product created.")
        except ApiError as e:
            self._report("Saving product", e)
            return
        self._fill_form(None)
        self.load_products()

    @on(Button.Pressed, "#btn-delete")
    def handle_delete(self) -> None:
        self.action_delete_product()

    def action_delete_product(self) -> None:
        table = self.query_one(DataTable)
        if not self._products or table.cursor_row is None:
            return
        if 0 <= table.cursor_row < len(self._products):
            self.delete_product(self._products[table.cursor_row])

    @work()
    async def delete_product(self, product: Dict[str, Any]) -> None:
        if not await self.app.push_screen_wait(
            confirm(f"Delete {product['name']}?", tone="error")
        ):
            return
        try:
            await self.app.state.client.delete_product(product["id"], admin=self._admin)
        except ApiError as e:
            self._report("Deleting product", e)
            return
        if self.editing_id == product["id"]:
            self._fill_form(None)
        self.notify("Product deleted.")
        self.load_products()
