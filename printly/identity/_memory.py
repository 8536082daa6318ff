"""In-memory identity provider for tests and local development."""

from __future__ import annotations

import asyncio
import secrets

from printly._types import ErrorKind
from printly.domain import AccountProfile
from printly.identity._types import IdentityError, IdentityNotFound

MIN_SECRET_LENGTH = 6


class MemoryIdentityProvider:
    def __init__(self) -> None:
        self._accounts: dict[str, AccountProfile] = {}
        self._lock = asyncio.Lock()

    async def create_account(self, profile: AccountProfile, secret: str) -> str:
        if not profile.email:
            raise IdentityError(ErrorKind.INVALID_ARGUMENT, "email is required")
        if len(secret) < MIN_SECRET_LENGTH:
            raise IdentityError(
                ErrorKind.INVALID_ARGUMENT,
                f"secret must be at least {MIN_SECRET_LENGTH} characters",
            )

        async with self._lock:
            email = profile.email.lower()
            if any(p.email.lower() == email for p in self._accounts.values()):
                raise IdentityError(ErrorKind.ALREADY_EXISTS, f"email {profile.email} already in use")

            uid = secrets.token_urlsafe(21)
            self._accounts[uid] = profile
            return uid

    async def delete_account(self, uid: str) -> None:
        async with self._lock:
            if self._accounts.pop(uid, None) is None:
                raise IdentityNotFound(uid)

    async def get_account(self, uid: str) -> AccountProfile:
        async with self._lock:
            profile = self._accounts.get(uid)
        if profile is None:
            raise IdentityNotFound(uid)
        return profile

    def __contains__(self, uid: object) -> bool:
        return uid in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)


__all__ = ("MemoryIdentityProvider",)
