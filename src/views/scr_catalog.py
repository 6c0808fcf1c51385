from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Label

from utils.messages import CartChangedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen

COLUMNS = ("ID", "Name", "Price", "Image", "In Cart")


class CatalogScreen(BaseScreen):
    """
    Product listing for every role. Buyers can add the highlighted row to the cart.
    """

    # the focused DataTable turns enter into RowSelected, this covers the rest of the screen
    BINDINGS = [
        Binding("enter", "add_to_cart", "Add to Cart", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-products")
        yield Label("No products yet.", id="label-no-products")
        with Horizontal(id="hort-catalog-buttons"):
            yield Button("Add to Cart", id="btn-add-to-cart", variant="primary")

    def on_mount(self):
        table = self._table()
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.focus()

    def _table(self) -> DataTable:
        table = self.query_one(DataTable)
        if not table.columns:
            table.add_columns(*COLUMNS)
        return table

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action == "add_to_cart":
            return self.app.state.role == "buyer"
        return True

    def action_add_to_cart(self) -> None:
        self.handle_add_to_cart()

    async def refresh_view(self) -> None:
        state = self.app.state
        is_buyer = state.role == "buyer"

        table = self._table()
        cursor_row = table.cursor_row
        table.clear()
        for product in state.products:
            table.add_row(
                product.id,
                product.name,
                format_price(product.price),
                product.image,
                state.qty(product.id) if is_buyer else "",
                key=str(product.id),
            )
        if state.products:
            table.move_cursor(row=min(cursor_row, len(state.products) - 1))

        self.query_one("#label-no-products").display = not state.products
        self.query_one("#hort-catalog-buttons").display = is_buyer
        self.refresh_bindings()

    def _add_product_at(self, row_key: str) -> None:
        state = self.app.state
        if state.role != "buyer":
            return
        product = next((p for p in state.products if str(p.id) == row_key), None)
        if product is None:
            return
        qty = state.add_to_cart(product)
        self.notify(f"Added {product.name} to cart (x{qty}).")
        self.post_message(CartChangedMessage())

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self._add_product_at(event.row_key.value)

    @on(Button.Pressed, "#btn-add-to-cart")
    def handle_add_to_cart(self) -> None:
        table = self.query_one(DataTable)
        if not table.row_count:
            self.notify("No product selected.", severity="warning")
            return
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        self._add_product_at(row_key.value)
