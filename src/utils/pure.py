import math
from typing import Dict, List, Literal, Mapping, Optional

from db.models import CartLine, Product, parse_price  # noqa: F401

Cart = Dict[int, CartLine]


def apply_add_to_cart(cart: Mapping[int, CartLine], product: Product) -> Cart:
    """Return a new cart with one more unit of product."""
    updated = dict(cart)
    line = updated.get(product.id)
    if line is None:
        updated[product.id] = CartLine.from_product(product)
    else:
        updated[product.id] = CartLine(
            id=line.id, name=line.name, price=line.price, image=line.image, qty=line.qty + 1
        )
    return updated


def apply_remove_from_cart(cart: Mapping[int, CartLine], product_id: int) -> Cart:
    """
    Return a new cart with one unit of product_id less; the line goes away at zero.
    An id that is not in the cart leaves it unchanged.
    """
    updated = dict(cart)
    line = updated.get(product_id)
    if line is None:
        return updated
    if line.qty <= 1:
        del updated[product_id]
    else:
        updated[product_id] = CartLine(
            id=line.id, name=line.name, price=line.price, image=line.image, qty=line.qty - 1
        )
    return updated


def cart_total(cart: Mapping[int, CartLine]) -> float:
    return sum((line.subtotal for line in cart.values()), 0.0)


def cart_count(cart: Mapping[int, CartLine]) -> int:
    """Number of distinct products in the cart."""
    return len(cart)


def format_price(value: float) -> str:
    if math.isnan(value):
        return "$NaN"
    return f"${value:.2f}"


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of values.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all left ('l').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    if aligns is None:
        aligns = ["l"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines.extend("| " + " | ".join(str(cell) for cell in row) + " |" for row in rows)
    return "\n".join(lines)
