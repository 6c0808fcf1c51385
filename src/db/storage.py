# persistence port injected into the storefront state
from __future__ import annotations

import json
from typing import Dict, List, Optional, Protocol

from db import crud
from db.models import Product, User


class StoragePort(Protocol):
    """
    Load/save pairs for the three persisted entities.
    Saves are write-through: they complete before the caller continues.
    """

    async def load_current_user(self) -> Optional[User]: ...

    async def save_current_user(self, user: Optional[User]) -> None: ...

    async def load_users(self) -> List[User]: ...

    async def save_users(self, users: List[User]) -> None: ...

    async def load_products(self) -> List[Product]: ...

    async def save_products(self, products: List[Product]) -> None: ...


class SqliteStorage:
    """Backed by the kv_store table, see db.database.DB_PATH."""

    async def load_current_user(self) -> Optional[User]:
        return await crud.load_current_user()

    async def save_current_user(self, user: Optional[User]) -> None:
        await crud.save_current_user(user)

    async def load_users(self) -> List[User]:
        return await crud.load_users()

    async def save_users(self, users: List[User]) -> None:
        await crud.save_users(users)

    async def load_products(self) -> List[Product]:
        return await crud.load_products()

    async def save_products(self, products: List[Product]) -> None:
        await crud.save_products(products)


class MemoryStorage:
    """
    Keeps JSON text in a dict under the same keys as the sqlite store,
    so values go through the same serialization and record decoding.
    """

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def _get(self, key: str):
        raw = self.data.get(key)
        return json.loads(raw) if raw is not None else None

    def _set(self, key: str, value) -> None:
        self.data[key] = json.dumps(value)

    async def load_current_user(self) -> Optional[User]:
        return crud.decode_current_user(self._get(crud.KEY_CURRENT_USER))

    async def save_current_user(self, user: Optional[User]) -> None:
        if user is None:
            self.data.pop(crud.KEY_CURRENT_USER, None)
        else:
            self._set(crud.KEY_CURRENT_USER, user.to_dict())

    async def load_users(self) -> List[User]:
        return crud.decode_users(self._get(crud.KEY_USERS))

    async def save_users(self, users: List[User]) -> None:
        self._set(crud.KEY_USERS, [u.to_dict() for u in users])

    async def load_products(self) -> List[Product]:
        return crud.decode_products(self._get(crud.KEY_PRODUCTS))

    async def save_products(self, products: List[Product]) -> None:
        self._set(crud.KEY_PRODUCTS, [p.to_dict() for p in products])
