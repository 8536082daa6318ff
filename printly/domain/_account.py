"""Account domain — local user records keyed by identity-provider uid."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def privileged(self) -> bool:
        return self is not Role.USER


@dataclass(frozen=True, slots=True)
class AccountProfile:
    """Registration input shared by the identity provider and the local row."""

    first_name: str
    last_name: str
    email: str
    phone_number: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True, slots=True)
class User:
    uid: str
    email: str
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    role: Role = Role.USER
    center_id: int | None = None  # managers only
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Actor:
    """Caller identity as resolved by the transport layer."""

    uid: str
    role: Role = Role.USER

    @property
    def privileged(self) -> bool:
        return self.role.privileged


__all__ = ("Role", "AccountProfile", "User", "Actor")
