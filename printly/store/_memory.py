"""
In-memory stores.

Note: single-process only (tests, local development). A lock serialises
access so the code index behaves like a unique constraint.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import fields as dc_fields, replace
from datetime import datetime

from kungfu import Result, Ok, Error

from printly.domain import (
    CenterStatus,
    Order,
    OrderStatus,
    PrintCenter,
    User,
)
from printly.store._types import StoreError, Fields


def _apply[T](entity: T, fields: Fields) -> Result[T, StoreError]:
    known = {f.name for f in dc_fields(entity)}  # type: ignore[arg-type]
    unknown = set(fields) - known
    if unknown:
        return Error(StoreError.backend(f"unknown fields: {sorted(unknown)}"))
    return Ok(replace(entity, **fields))  # type: ignore[type-var]


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryOrderStore:
    def __init__(self) -> None:
        self._orders: dict[int, Order] = {}
        self._by_code: dict[str, int] = {}
        self._order_ids = itertools.count(1)
        self._document_ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def save(self, order: Order) -> Result[Order, StoreError]:
        async with self._lock:
            if order.code in self._by_code:
                return Error(StoreError.duplicate(f"order code {order.code} already in use"))

            order_id = next(self._order_ids)
            now = datetime.now()
            documents = tuple(
                replace(doc, id=next(self._document_ids), order_id=order_id)
                for doc in order.documents
            )
            saved = replace(
                order,
                id=order_id,
                documents=documents,
                created_at=order.created_at or now,
                updated_at=order.updated_at or now,
            )
            self._orders[order_id] = saved
            self._by_code[saved.code] = order_id
            return Ok(saved)

    async def find_by_id(self, order_id: int) -> Result[Order | None, StoreError]:
        async with self._lock:
            return Ok(self._orders.get(order_id))

    async def find_by_code(self, code: str) -> Result[Order | None, StoreError]:
        async with self._lock:
            order_id = self._by_code.get(code)
            return Ok(self._orders.get(order_id) if order_id is not None else None)

    async def update(
        self,
        order_id: int,
        fields: Fields,
        *,
        expected_status: OrderStatus | None = None,
    ) -> Result[Order, StoreError]:
        async with self._lock:
            existing = self._orders.get(order_id)
            if existing is None:
                return Error(StoreError.not_found(f"order {order_id} not found"))
            if expected_status is not None and existing.status is not expected_status:
                return Error(StoreError.conflict(
                    f"order {order_id} is {existing.status.value}, expected {expected_status.value}"
                ))
            if "code" in fields and fields["code"] != existing.code:
                return Error(StoreError.backend("order code is immutable"))

            match _apply(existing, fields):
                case Ok(updated):
                    self._orders[order_id] = updated
                    return Ok(updated)
                case Error(e):
                    return Error(e)

    async def delete(self, order_id: int) -> Result[Order, StoreError]:
        async with self._lock:
            existing = self._orders.pop(order_id, None)
            if existing is None:
                return Error(StoreError.not_found(f"order {order_id} not found"))
            self._by_code.pop(existing.code, None)
            return Ok(existing)

    async def find_all(self) -> Result[list[Order], StoreError]:
        async with self._lock:
            return Ok(list(self._orders.values()))

    async def find_by_center(self, center_id: int) -> Result[list[Order], StoreError]:
        async with self._lock:
            return Ok([o for o in self._orders.values() if o.center_id == center_id])

    async def find_by_user(self, user_uid: str) -> Result[list[Order], StoreError]:
        async with self._lock:
            return Ok([o for o in self._orders.values() if o.user_uid == user_uid])

    async def find_by_status(self, status: OrderStatus) -> Result[list[Order], StoreError]:
        async with self._lock:
            return Ok([o for o in self._orders.values() if o.status is status])


# ═══════════════════════════════════════════════════════════════════════════════
# Centers
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCenterStore:
    def __init__(self) -> None:
        self._centers: dict[int, PrintCenter] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def save(self, center: PrintCenter) -> Result[PrintCenter, StoreError]:
        async with self._lock:
            center_id = center.id if center.id is not None else next(self._ids)
            if center_id in self._centers:
                return Error(StoreError.duplicate(f"center {center_id} already exists"))
            saved = replace(center, id=center_id)
            self._centers[center_id] = saved
            return Ok(saved)

    async def find_by_id(self, center_id: int) -> Result[PrintCenter | None, StoreError]:
        async with self._lock:
            return Ok(self._centers.get(center_id))

    async def update(self, center_id: int, fields: Fields) -> Result[PrintCenter, StoreError]:
        async with self._lock:
            existing = self._centers.get(center_id)
            if existing is None:
                return Error(StoreError.not_found(f"center {center_id} not found"))
            match _apply(existing, fields):
                case Ok(updated):
                    self._centers[center_id] = updated
                    return Ok(updated)
                case Error(e):
                    return Error(e)

    async def delete(self, center_id: int) -> Result[None, StoreError]:
        async with self._lock:
            if self._centers.pop(center_id, None) is None:
                return Error(StoreError.not_found(f"center {center_id} not found"))
            return Ok(None)

    async def find_all(self) -> Result[list[PrintCenter], StoreError]:
        async with self._lock:
            return Ok(list(self._centers.values()))

    async def find_by_status(self, status: CenterStatus) -> Result[list[PrintCenter], StoreError]:
        async with self._lock:
            return Ok([c for c in self._centers.values() if c.status is status])


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryUserStore:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def save(self, user: User) -> Result[User, StoreError]:
        async with self._lock:
            if user.uid in self._users:
                return Error(StoreError.duplicate(f"user {user.uid} already exists"))
            self._users[user.uid] = user
            return Ok(user)

    async def find_by_uid(self, uid: str) -> Result[User | None, StoreError]:
        async with self._lock:
            return Ok(self._users.get(uid))

    async def update(self, uid: str, fields: Fields) -> Result[User, StoreError]:
        async with self._lock:
            existing = self._users.get(uid)
            if existing is None:
                return Error(StoreError.not_found(f"user {uid} not found"))
            match _apply(existing, fields):
                case Ok(updated):
                    self._users[uid] = updated
                    return Ok(updated)
                case Error(e):
                    return Error(e)

    async def delete(self, uid: str) -> Result[None, StoreError]:
        async with self._lock:
            if self._users.pop(uid, None) is None:
                return Error(StoreError.not_found(f"user {uid} not found"))
            return Ok(None)

    async def find_all(self) -> Result[list[User], StoreError]:
        async with self._lock:
            return Ok(list(self._users.values()))


__all__ = ("MemoryOrderStore", "MemoryCenterStore", "MemoryUserStore")
