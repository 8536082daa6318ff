"""
Identity provider — the external account system (the "first system" of an
account registration).

Providers raise; the account service lifts their exceptions into Results.
"""

from __future__ import annotations

from typing import Protocol

from printly._types import ErrorKind
from printly.domain import AccountProfile


class IdentityError(Exception):
    """Provider failure, tagged with the platform kind it maps to."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class IdentityNotFound(IdentityError):
    def __init__(self, uid: str) -> None:
        super().__init__(ErrorKind.NOT_FOUND, f"identity account {uid} not found")
        self.uid = uid


class IdentityProvider(Protocol):
    async def create_account(self, profile: AccountProfile, secret: str) -> str:
        """
        Create an account and return its uid.

        Raises IdentityError with kind ALREADY_EXISTS when the email is taken.
        """
        ...

    async def delete_account(self, uid: str) -> None:
        """Raises IdentityNotFound when no such account exists."""
        ...


__all__ = ("IdentityError", "IdentityNotFound", "IdentityProvider")
