"""Print center domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CenterStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


@dataclass(frozen=True, slots=True)
class PrintCenter:
    name: str
    email: str
    phone_number: str = ""
    owner_uid: str = ""
    status: CenterStatus = CenterStatus.PENDING
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def accepts_orders(self) -> bool:
        return self.status is CenterStatus.APPROVED


__all__ = ("CenterStatus", "PrintCenter")
