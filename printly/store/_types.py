"""
Store protocols — narrow persistence interfaces consumed by the core.

All methods return Result for explicit error handling.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from kungfu import Result

from printly.domain import (
    CenterStatus,
    Order,
    OrderStatus,
    PrintCenter,
    User,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


class StoreErrorKind(Enum):
    NOT_FOUND = auto()  # Row to update/delete is absent
    DUPLICATE = auto()  # Unique constraint violated
    CONFLICT = auto()  # Row changed since it was read
    BACKEND = auto()  # Anything else (connectivity, driver)


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    kind: StoreErrorKind
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message

    @classmethod
    def not_found(cls, message: str) -> StoreError:
        return cls(StoreErrorKind.NOT_FOUND, message)

    @classmethod
    def duplicate(cls, message: str, cause: Exception | None = None) -> StoreError:
        return cls(StoreErrorKind.DUPLICATE, message, cause)

    @classmethod
    def conflict(cls, message: str) -> StoreError:
        return cls(StoreErrorKind.CONFLICT, message)

    @classmethod
    def backend(cls, message: str, cause: Exception | None = None) -> StoreError:
        return cls(StoreErrorKind.BACKEND, message, cause)


type Fields = Mapping[str, object]
"""Partial update: column name → new value."""


# ═══════════════════════════════════════════════════════════════════════════════
# Order Store
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStore(Protocol):
    """
    Orders and their documents.

    save() persists an order together with all of its documents as one unit
    and returns it with ids assigned. A second order with the same code must
    fail with StoreErrorKind.DUPLICATE: that constraint, not any pre-check,
    is what keeps pickup codes unique.
    """

    async def save(self, order: Order) -> Result[Order, StoreError]: ...

    async def find_by_id(self, order_id: int) -> Result[Order | None, StoreError]: ...

    async def find_by_code(self, code: str) -> Result[Order | None, StoreError]: ...

    async def update(
        self,
        order_id: int,
        fields: Fields,
        *,
        expected_status: OrderStatus | None = None,
    ) -> Result[Order, StoreError]:
        """
        Apply fields and return the updated order. NOT_FOUND if absent.

        With expected_status the write only happens while the stored status
        still equals it, otherwise CONFLICT and nothing changes.
        """
        ...

    async def delete(self, order_id: int) -> Result[Order, StoreError]:
        """Hard delete, cascading to documents. Returns the removed order."""
        ...

    async def find_all(self) -> Result[list[Order], StoreError]: ...

    async def find_by_center(self, center_id: int) -> Result[list[Order], StoreError]: ...

    async def find_by_user(self, user_uid: str) -> Result[list[Order], StoreError]: ...

    async def find_by_status(self, status: OrderStatus) -> Result[list[Order], StoreError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Center Store
# ═══════════════════════════════════════════════════════════════════════════════


class CenterLookup(Protocol):
    """The only thing order creation needs to know about print centers."""

    async def find_by_id(self, center_id: int) -> Result[PrintCenter | None, StoreError]: ...


class CenterStore(CenterLookup, Protocol):
    async def save(self, center: PrintCenter) -> Result[PrintCenter, StoreError]: ...

    async def update(self, center_id: int, fields: Fields) -> Result[PrintCenter, StoreError]: ...

    async def delete(self, center_id: int) -> Result[None, StoreError]: ...

    async def find_all(self) -> Result[list[PrintCenter], StoreError]: ...

    async def find_by_status(self, status: CenterStatus) -> Result[list[PrintCenter], StoreError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# User Store
# ═══════════════════════════════════════════════════════════════════════════════


class UserStore(Protocol):
    """Local account rows keyed by identity-provider uid."""

    async def save(self, user: User) -> Result[User, StoreError]: ...

    async def find_by_uid(self, uid: str) -> Result[User | None, StoreError]: ...

    async def update(self, uid: str, fields: Fields) -> Result[User, StoreError]: ...

    async def delete(self, uid: str) -> Result[None, StoreError]: ...

    async def find_all(self) -> Result[list[User], StoreError]: ...


__all__ = (
    "StoreErrorKind",
    "StoreError",
    "Fields",
    "OrderStore",
    "CenterLookup",
    "CenterStore",
    "UserStore",
)
