from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, HorizontalGroup, VerticalScroll
from textual.widgets import Button, Label, Rule

from db.models import CartLine, Product
from utils.messages import CartChangedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen


class CartLineWidget(HorizontalGroup):
    def __init__(self, line: CartLine):
        super().__init__()
        self.line = line

    def compose(self) -> ComposeResult:
        with Container(id="div-item"):
            yield Label(f"{self.line.name} (x{self.line.qty})", id="label-item-name")
            yield Label(format_price(self.line.subtotal), id="label-item-price")
        with Container(id="div-actions"):
            yield Button("-", id="btn-line-dec")
            yield Button("+", id="btn-line-inc")

    @on(Button.Pressed, "#btn-line-dec")
    def handle_decrement(self, event: Button.Pressed) -> None:
        event.stop()
        if not self.app.state.remove_from_cart(self.line.id):
            self.notify("Item is no longer in the cart.", severity="warning")
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-line-inc")
    def handle_increment(self, event: Button.Pressed) -> None:
        event.stop()
        # re-add from the line's own snapshot, not the current catalog entry
        line = self.line
        self.app.state.add_to_cart(
            Product(id=line.id, name=line.name, price=line.price, image=line.image)
        )
        self.post_message(CartChangedMessage())


class CartScreen(BaseScreen):
    """
    Cart lines with quantity controls and the running total. Buyers only.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Rule(line_style="dashed")
        yield Label("Total: $0.00", id="label-cart-total")

    async def refresh_view(self) -> None:
        self.rebuild_lines()

    @work(exclusive=True)  # must be exclusive, overlapping rebuilds mount duplicates
    async def rebuild_lines(self) -> None:
        state = self.app.state
        content = self.query_one("#vertscroll-content")
        shown = [(w.line.id, w.line.qty) for w in content.query(CartLineWidget)]
        current = [(line.id, line.qty) for line in state.cart.values()]

        if shown != current or not content.children:
            await content.remove_children()
            if state.cart:
                await content.mount_all(
                    [CartLineWidget(line) for line in state.cart.values()]
                )
                content.remove_class("no-items")
            else:
                await content.mount(Label("Cart is empty", classes="cart-empty"))
                content.add_class("no-items")

        self.query_one("#label-cart-total", Label).update(
            f"Total: {format_price(state.total)}"
        )
