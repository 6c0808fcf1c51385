# provide dataclass models, plus the typed form inputs checked at the UI boundary
from __future__ import annotations

import dataclasses
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from utils.errors import ValidationError

ROLES = ("buyer", "seller")

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300"

_LEADING_NUMBER = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


def parse_price(value: Any) -> float:
    """
    Lenient price parsing, used for entered, imported and stored prices.

    Numbers pass through, strings are read up to the end of their leading
    decimal literal ("9.99" -> 9.99, "12abc" -> 12.0), everything else is NaN.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return math.nan

    match = _LEADING_NUMBER.match(value)
    if not match:
        return math.nan
    literal = match.group(1)
    if literal.lstrip("+-") == "Infinity":
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


@dataclass(frozen=True)
class User:
    username: str
    name: str
    role: str  # "buyer" or "seller"

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        username = str(data["username"])
        return cls(
            username=username,
            name=str(data.get("name") or username),
            role=str(data["role"]),
        )


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float  # NaN when the entered price could not be parsed
    image: str = PLACEHOLDER_IMAGE

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Product:
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            price=parse_price(data.get("price")),
            image=str(data.get("image") or PLACEHOLDER_IMAGE),
        )


@dataclass(frozen=True)
class CartLine:
    """A snapshot of a product taken when it was first added, plus a quantity."""

    id: int
    name: str
    price: float
    image: str
    qty: int

    @classmethod
    def from_product(cls, product: Product, qty: int = 1) -> CartLine:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            image=product.image,
            qty=qty,
        )

    @property
    def subtotal(self) -> float:
        return self.price * self.qty


@dataclass(frozen=True)
class AuthForm:
    username: str
    name: str
    role: str

    def __post_init__(self) -> None:
        if not self.username.strip():
            raise ValidationError("Please enter a username")
        if self.role not in ROLES:
            raise ValidationError("Please select a role")

    @classmethod
    def from_raw(cls, username: str | None, name: str | None, role: str | None) -> AuthForm:
        """
        Normalize raw form values. Name falls back to the username.
        Raises ValidationError on an empty username or an unknown role.
        """
        username = (username or "").strip()
        name = (name or "").strip() or username
        role = (role or "").strip()
        return cls(username=username, name=name, role=role)


@dataclass(frozen=True)
class ProductForm:
    name: str
    price: str  # raw text, parsed leniently when the product is created
    image: str

    def __post_init__(self) -> None:
        if not self.name.strip() or not self.price.strip():
            raise ValidationError("Product name and price are required")

    @classmethod
    def from_raw(cls, name: str | None, price: str | None, image: str | None) -> ProductForm:
        name = (name or "").strip()
        price = (price or "").strip()
        return cls(name=name, price=price, image=(image or "").strip())
