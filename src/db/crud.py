# src/db/crud.py
from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from db import models
from db.database import connect
from utils.logger import get_logger
from utils.security import hash_password, verify_password

_logger = get_logger(__name__)


class EmailTakenError(Exception):
    """Raised by register_user when the email is already in use."""


def _parse_items(raw: Optional[str]) -> List[Dict[str, Any]]:
    """Best-effort decode of the serialized order item list."""
    try:
        items = json.loads(raw) if raw else []
    except (TypeError, ValueError):
        return []
    return items if isinstance(items, list) else []


def _to_float(val) -> float:
    try:
        num = float(val)
    except (TypeError, ValueError):
        return 0.0
    # NaN is stored as 0
    return num if num == num else 0.0


# ---------------------------
# Users
# ---------------------------


async def register_user(name: str, email: str, password: str) -> models.User:
    """
    Create a regular (non-admin) user and return it.
    Raises EmailTakenError on a duplicate email.
    """
    async with connect() as conn:
        try:
            cur = await conn.execute(
                "INSERT INTO users (name, email, password, is_admin) VALUES (?, ?, ?, 0);",
                (name, email, hash_password(password)),
            )
        except sqlite3.IntegrityError as e:
            raise EmailTakenError(email) from e
        user_id = cur.lastrowid
        await cur.close()
        await conn.commit()
    _logger.info(f"Registered user {user_id} <{email}>")
    return models.User(id=user_id, name=name, email=email, is_admin=0)


async def login(email: str, password: str) -> Optional[models.User]:
    """Return the User if email/password match; otherwise None."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT id, name, email, password, is_admin FROM users WHERE email = ?;",
            (email,),
        )
        row = await cur.fetchone()
        await cur.close()
    if not row or not verify_password(password or "", row[3]):
        return None
    return models.User(
        id=int(row[0]), name=row[1], email=row[2], is_admin=int(row[4] or 0)
    )


# ---------------------------
# Products
# ---------------------------


def _row_to_product(row) -> models.Product:
    return models.Product(
        id=int(row[0]),
        name=row[1] or "",
        price=row[2] or "",
        img=row[3] or "",
        tag=row[4] or "",
    )


async def list_products() -> List[models.Product]:
    """All products, newest first."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT id, name, price, img, tag FROM products ORDER BY id DESC;"
        )
        rows = await cur.fetchall()
        await cur.close()
    return [_row_to_product(row) for row in rows]


async def create_product(
    name: str, price: str, img: Optional[str] = None, tag: Optional[str] = None
) -> int:
    """Insert a product and return its id."""
    async with connect() as conn:
        cur = await conn.execute(
            "INSERT INTO products (name, price, img, tag) VALUES (?, ?, ?, ?);",
            (name, price, img or "", tag or ""),
        )
        pid = cur.lastrowid
        await cur.close()
        await conn.commit()
    return pid


async def update_product(
    pid: int,
    name: Optional[str],
    price: Optional[str],
    img: Optional[str] = None,
    tag: Optional[str] = None,
) -> bool:
    """
    Overwrite every column of a product. Return True if a row was updated.
    """
    async with connect() as conn:
        cur = await conn.execute(
            "UPDATE products SET name = ?, price = ?, img = ?, tag = ? WHERE id = ?;",
            (name, price, img or "", tag or "", pid),
        )
        updated = cur.rowcount > 0
        await cur.close()
        await conn.commit()
    return updated


async def delete_product(pid: int) -> bool:
    async with connect() as conn:
        cur = await conn.execute("DELETE FROM products WHERE id = ?;", (pid,))
        deleted = cur.rowcount > 0
        await cur.close()
        await conn.commit()
    return deleted


# ---------------------------
# Orders
# ---------------------------


async def create_order(
    email: str,
    items: List[Dict[str, Any]],
    total: Any,
    created_at: Optional[datetime] = None,
) -> Tuple[int, str]:
    """
    Record an order and return (id, created_at) where created_at is ISO-8601 UTC.
    The item list is stored as opaque JSON text.
    """
    created = (created_at or datetime.now(timezone.utc)).isoformat()
    async with connect() as conn:
        cur = await conn.execute(
            "INSERT INTO orders (email, items, total, created_at) VALUES (?, ?, ?, ?);",
            (email, json.dumps(items), _to_float(total), created),
        )
        ono = cur.lastrowid
        await cur.close()
        await conn.commit()
    _logger.info(f"Order {ono} recorded for <{email}>")
    return ono, created


async def list_orders() -> List[models.Order]:
    """All orders, newest first, with item lists decoded best-effort."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT id, email, items, total, created_at FROM orders ORDER BY id DESC;"
        )
        rows = await cur.fetchall()
        await cur.close()
    return [
        models.Order(
            id=int(row[0]),
            email=row[1] or "",
            items=_parse_items(row[2]),
            total=_to_float(row[3]),
            created_at=row[4] or "",
        )
        for row in rows
    ]
