# src/db/crud.py
from __future__ import annotations

import json
from typing import Any, Callable, List, Optional, TypeVar

from db import models
from db.database import connect
from utils.logger import get_logger

_logger = get_logger(__name__)

KEY_CURRENT_USER = "currentUser"
KEY_USERS = "users"
KEY_PRODUCTS = "products"

T = TypeVar("T")


# ---------------------------
# Raw key-value access
# ---------------------------


async def get_value(key: str) -> Optional[Any]:
    """Return the JSON-decoded value stored under key, or None if absent.

    A value that no longer decodes is logged and reported as absent.
    """
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM kv_store WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    if not row:
        return None
    try:
        return json.loads(row[0])
    except json.JSONDecodeError as e:
        _logger.warning(f"Ignoring undecodable value under '{key}': {e}")
        return None


async def set_value(key: str, value: Any) -> None:
    """Serialize value to JSON and store it under key, replacing any previous value."""
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO kv_store(key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value;
            """,
            (key, json.dumps(value)),
        )
        await conn.commit()


async def delete_value(key: str) -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
        await conn.commit()


# ---------------------------
# Record decoding
# ---------------------------


def decode_current_user(data: Any) -> Optional[models.User]:
    """Snapshot from its stored JSON, or None when absent or malformed."""
    if data is None:
        return None
    try:
        return models.User.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        _logger.warning(f"Ignoring malformed '{KEY_CURRENT_USER}' snapshot: {e!r}")
        return None


def _decode_records(key: str, data: Any, factory: Callable[[Any], T]) -> List[T]:
    """Decode a stored array, dropping the records that do not fit the model."""
    if data is None:
        return []
    if not isinstance(data, list):
        _logger.warning(f"Ignoring '{key}', expected an array.")
        return []
    records = []
    for idx, item in enumerate(data):
        try:
            records.append(factory(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            _logger.warning(f"Dropping malformed '{key}' record #{idx}: {e!r}")
    return records


def decode_users(data: Any) -> List[models.User]:
    return _decode_records(KEY_USERS, data, models.User.from_dict)


def decode_products(data: Any) -> List[models.Product]:
    return _decode_records(KEY_PRODUCTS, data, models.Product.from_dict)


# ---------------------------
# Session snapshot
# ---------------------------


async def load_current_user() -> Optional[models.User]:
    return decode_current_user(await get_value(KEY_CURRENT_USER))


async def save_current_user(user: Optional[models.User]) -> None:
    """Store the snapshot, or remove it when user is None."""
    if user is None:
        await delete_value(KEY_CURRENT_USER)
    else:
        await set_value(KEY_CURRENT_USER, user.to_dict())


# ---------------------------
# User directory
# ---------------------------


async def load_users() -> List[models.User]:
    return decode_users(await get_value(KEY_USERS))


async def save_users(users: List[models.User]) -> None:
    await set_value(KEY_USERS, [u.to_dict() for u in users])


# ---------------------------
# Product catalog
# ---------------------------


async def load_products() -> List[models.Product]:
    return decode_products(await get_value(KEY_PRODUCTS))


async def save_products(products: List[models.Product]) -> None:
    await set_value(KEY_PRODUCTS, [p.to_dict() for p in products])
