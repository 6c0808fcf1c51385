from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DirectoryTree, Input, Label

from db.models import ProductForm
from utils.errors import StorefrontError
from utils.logger import get_logger
from views.base_screen import BaseScreen

_logger = get_logger(__name__)

IMPORT_HINT = "File format: JSON array of products [{name, price, image}]"


class JsonDirectoryTree(DirectoryTree):
    """Directory tree that only lists folders and .json files."""

    def filter_paths(self, paths: Iterable[Path]) -> Iterable[Path]:
        return [
            path
            for path in paths
            if not path.name.startswith(".")
            and (path.is_dir() or path.suffix.lower() == ".json")
        ]


class SellerDashboardScreen(BaseScreen):
    """
    Sellers add products one at a time or import a JSON file of them.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-seller"):
            yield Label("Add Products", id="label-add-products")
            with Horizontal(id="div-product-form"):
                yield Input(placeholder="Product Name", id="input-prod-name")
                yield Input(placeholder="Price", id="input-prod-price", type="number")
                yield Input(placeholder="Image URL", id="input-prod-image")
                yield Button("Add Product", id="btn-add-product", variant="primary")
            yield Label(IMPORT_HINT, id="label-import-hint")
            yield JsonDirectoryTree(self.app.settings.import_dir, id="tree-import")

    def on_mount(self) -> None:
        self.query_one("#input-prod-name", Input).focus()

    @on(Input.Submitted)
    @on(Button.Pressed, "#btn-add-product")
    async def handle_add_product(self) -> None:
        inputs = [
            self.query_one(f"#input-prod-{field}", Input)
            for field in ("name", "price", "image")
        ]
        try:
            form = ProductForm.from_raw(*(i.value for i in inputs))
            product = await self.app.state.add_product(form)
        except StorefrontError as e:
            self.notify(str(e), severity="error")
            return

        for i in inputs:
            i.value = ""
        inputs[0].focus()
        self.notify(f"Added {product.name}.")

    @on(DirectoryTree.FileSelected)
    @work(exclusive=True)
    async def handle_import_file(self, event: DirectoryTree.FileSelected) -> None:
        path = event.path
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _logger.warning(f"Could not read {path}: {e}")
            self.notify(f"Could not read {path.name}.", severity="error")
            return

        try:
            imported = await self.app.state.import_products(text)
        except StorefrontError as e:
            self.notify(str(e), severity="error")
            return

        self.notify(f"Imported {len(imported)} products from {path.name}.")
