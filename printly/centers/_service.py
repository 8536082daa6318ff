"""
Print centers — registration and approval status.
"""

from __future__ import annotations

import logging
from datetime import datetime

from kungfu import Result, Ok, Error

from printly._errors import from_store
from printly._types import Errors, PrintlyError
from printly.domain import CenterStatus, PrintCenter
from printly.store import CenterStore, Fields, StoreError

logger = logging.getLogger(__name__)

_EDITABLE = frozenset({"name", "email", "phone_number"})


class CenterService:
    """
    New centers start pending; only approved centers accept orders.

    Also satisfies CenterLookup, so it can be handed to OrderService directly.
    """

    def __init__(self, centers: CenterStore) -> None:
        self._centers = centers

    async def register(
        self,
        name: str,
        email: str,
        *,
        phone_number: str = "",
        owner_uid: str = "",
    ) -> Result[PrintCenter, PrintlyError]:
        if not name.strip() or not email.strip():
            return Error(Errors.invalid_argument("center name and email are required"))

        now = datetime.now()
        center = PrintCenter(
            name=name.strip(),
            email=email.strip(),
            phone_number=phone_number,
            owner_uid=owner_uid,
            status=CenterStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        match await self._centers.save(center):
            case Ok(saved):
                logger.info("registered print center %s (%s)", saved.id, saved.name)
                return Ok(saved)
            case Error(e):
                return Error(from_store(e, "print center", name))

    async def find_by_id(self, center_id: int) -> Result[PrintCenter | None, StoreError]:
        return await self._centers.find_by_id(center_id)

    async def get(self, center_id: int) -> Result[PrintCenter, PrintlyError]:
        match await self._centers.find_by_id(center_id):
            case Ok(None):
                return Error(Errors.not_found("print center", center_id))
            case Ok(center):
                return Ok(center)
            case Error(e):
                return Error(from_store(e, "print center", center_id))

    async def set_status(self, center_id: int, status: CenterStatus) -> Result[PrintCenter, PrintlyError]:
        match await self._update(center_id, {"status": status}):
            case Ok(center):
                logger.info("print center %s is now %s", center_id, status.value)
                return Ok(center)
            case Error(e):
                return Error(e)

    async def update(self, center_id: int, fields: Fields) -> Result[PrintCenter, PrintlyError]:
        unknown = set(fields) - _EDITABLE
        if unknown:
            return Error(Errors.invalid_argument(f"cannot update {sorted(unknown)}"))
        return await self._update(center_id, fields)

    async def _update(self, center_id: int, fields: Fields) -> Result[PrintCenter, PrintlyError]:
        changes = {**fields, "updated_at": datetime.now()}
        return (await self._centers.update(center_id, changes)).map_err(
            lambda e: from_store(e, "print center", center_id)
        )

    async def delete(self, center_id: int) -> Result[None, PrintlyError]:
        return (await self._centers.delete(center_id)).map_err(
            lambda e: from_store(e, "print center", center_id)
        )

    async def list_public(self) -> Result[list[PrintCenter], PrintlyError]:
        return await self._by_status(CenterStatus.APPROVED)

    async def list_pending(self) -> Result[list[PrintCenter], PrintlyError]:
        return await self._by_status(CenterStatus.PENDING)

    async def list_all(self) -> Result[list[PrintCenter], PrintlyError]:
        return (await self._centers.find_all()).map_err(lambda e: from_store(e, "print centers", "*"))

    async def _by_status(self, status: CenterStatus) -> Result[list[PrintCenter], PrintlyError]:
        return (await self._centers.find_by_status(status)).map_err(
            lambda e: from_store(e, "print centers", status.value)
        )


__all__ = ("CenterService",)
