from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Literal, Optional

from db.models import PLACEHOLDER_IMAGE, AuthForm, Product, ProductForm, User
from db.storage import StoragePort
from utils import pure
from utils.errors import (
    DuplicateUsernameError,
    ImportFormatError,
    RoleMismatchError,
    UnknownUserError,
)
from utils.logger import get_logger

_logger = get_logger(__name__)

AuthMode = Literal["login", "signup"]


@dataclass
class StorefrontState:
    """
    Centralized application state shared by screens.

    Fields:
      - storage: where the session snapshot, user directory and catalog live
      - user: current logged-in user, None when logged out
      - auth_mode: what the auth form does on submit, "login" | "signup"
      - cart: product id -> CartLine, never persisted
      - products: the catalog, in insertion order
    """

    storage: StoragePort
    user: Optional[User] = None
    auth_mode: AuthMode = "login"
    cart: pure.Cart = field(default_factory=dict)
    products: List[Product] = field(default_factory=list)

    clear_cart_on_logout: bool = False
    clock: Callable[[], float] = time.time

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user else None

    @property
    def total(self) -> float:
        return pure.cart_total(self.cart)

    @property
    def cart_count(self) -> int:
        return pure.cart_count(self.cart)

    async def restore(self) -> Optional[User]:
        """Load the saved session snapshot and the catalog. Called once on startup."""
        self.user = await self.storage.load_current_user()
        self.products = await self.storage.load_products()
        if self.user:
            _logger.info(f"Restored session for '{self.user.username}'.")
        return self.user

    # ---------------------------
    # Auth
    # ---------------------------

    def set_auth_mode(self, mode: AuthMode) -> None:
        self.auth_mode = mode

    def toggle_auth_mode(self) -> AuthMode:
        self.auth_mode = "signup" if self.auth_mode == "login" else "login"
        return self.auth_mode

    async def authenticate(self, form: AuthForm) -> User:
        if self.auth_mode == "signup":
            return await self.signup(form)
        return await self.login(form)

    async def signup(self, form: AuthForm) -> User:
        users = await self.storage.load_users()
        if any(u.username == form.username for u in users):
            _logger.info(f"Signup rejected, '{form.username}' is taken.")
            raise DuplicateUsernameError(form.username)

        user = User(username=form.username, name=form.name, role=form.role)
        users.append(user)
        await self.storage.save_users(users)
        await self._set_user(user)
        _logger.info(f"Signed up '{user.username}' as {user.role}.")
        return user

    async def login(self, form: AuthForm) -> User:
        users = await self.storage.load_users()
        user = next((u for u in users if u.username == form.username), None)
        if user is None:
            _logger.info(f"Login rejected, '{form.username}' not found.")
            raise UnknownUserError(form.username)
        if user.role != form.role:
            _logger.info(f"Login rejected, '{user.username}' is a {user.role}.")
            raise RoleMismatchError(user.username, user.role)

        await self._set_user(user)
        _logger.info(f"Logged in '{user.username}'.")
        return user

    async def logout(self) -> None:
        if self.user:
            _logger.info(f"Logged out '{self.user.username}'.")
        await self._set_user(None)
        if self.clear_cart_on_logout:
            self.cart = {}

    async def _set_user(self, user: Optional[User]) -> None:
        self.user = user
        await self.storage.save_current_user(user)

    # ---------------------------
    # Cart
    # ---------------------------

    def add_to_cart(self, product: Product) -> int:
        """Add one unit, return the new quantity of that product."""
        self.cart = pure.apply_add_to_cart(self.cart, product)
        return self.cart[product.id].qty

    def remove_from_cart(self, product_id: int) -> bool:
        """Remove one unit. Returns False if the product was not in the cart."""
        if product_id not in self.cart:
            _logger.debug(f"Nothing to remove for product {product_id}.")
            return False
        self.cart = pure.apply_remove_from_cart(self.cart, product_id)
        return True

    def qty(self, product_id: int) -> int:
        line = self.cart.get(product_id)
        return line.qty if line else 0

    # ---------------------------
    # Catalog
    # ---------------------------

    def _next_id(self) -> int:
        """Creation time in ms, bumped past every id already in the catalog."""
        now_ms = int(self.clock() * 1000)
        if self.products:
            return max(now_ms, max(p.id for p in self.products) + 1)
        return now_ms

    async def add_product(self, form: ProductForm) -> Product:
        product = Product(
            id=self._next_id(),
            name=form.name,
            price=pure.parse_price(form.price),
            image=form.image or PLACEHOLDER_IMAGE,
        )
        await self._append_products([product])
        _logger.info(f"Added product {product.id} '{product.name}'.")
        return product

    async def import_products(self, text: str) -> List[Product]:
        """
        Append every element of a JSON array of {name, price, image} objects.
        Nothing is added when the text is not such an array.
        """
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            _logger.warning(f"Import rejected: {e}")
            raise ImportFormatError(str(e)) from e

        if not isinstance(data, list):
            _logger.warning("Import rejected: top-level value is not an array.")
            raise ImportFormatError("expected a JSON array")
        if not all(isinstance(item, dict) for item in data):
            _logger.warning("Import rejected: array holds non-object elements.")
            raise ImportFormatError("expected an array of objects")

        base_id = self._next_id()
        imported = [
            Product(
                id=base_id + idx,
                name="" if item.get("name") is None else str(item["name"]),
                price=pure.parse_price(item.get("price")),
                image=str(item.get("image") or PLACEHOLDER_IMAGE),
            )
            for idx, item in enumerate(data)
        ]
        await self._append_products(imported)
        _logger.info(f"Imported {len(imported)} products.")
        return imported

    async def _append_products(self, new_products: List[Product]) -> None:
        self.products = [*self.products, *new_products]
        await self.storage.save_products(self.products)
