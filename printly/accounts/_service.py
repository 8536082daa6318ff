"""
Account provisioning — identity provider account + local user row.
"""

from __future__ import annotations

import logging
from datetime import datetime

from kungfu import Result, Ok, Error

from printly import saga as S
from printly._errors import from_store
from printly._types import ErrorKind, Errors, PrintlyError
from printly.domain import AccountProfile, Role, User
from printly.identity import IdentityError, IdentityNotFound, IdentityProvider
from printly.store import Fields, UserStore

logger = logging.getLogger(__name__)

_PROVIDER_KINDS = frozenset({ErrorKind.ALREADY_EXISTS, ErrorKind.INVALID_ARGUMENT})
_PROFILE_FIELDS = frozenset({"email", "first_name", "last_name", "phone_number"})


def _identity_error(e: Exception) -> PrintlyError:
    if isinstance(e, IdentityError):
        return PrintlyError(e.kind, e.message, e)
    return Errors.internal(f"identity provider failure: {e}", e)


class AccountService:
    """
    Keeps identity-provider accounts and local user rows in step.

    Example:
        accounts = AccountService(MemoryIdentityProvider(), MemoryUserStore())

        match await accounts.register(profile, "s3cret!"):
            case Ok(user):
                ...
            case Error(e) if e.kind is ErrorKind.ALREADY_EXISTS:
                ...
    """

    def __init__(
        self,
        identity: IdentityProvider,
        users: UserStore,
        *,
        on_orphan: S.OrphanHook = S.log_orphans,
    ) -> None:
        self._identity = identity
        self._users = users
        self._on_orphan = on_orphan

    async def register(self, profile: AccountProfile, secret: str) -> Result[User, PrintlyError]:
        if not profile.email or not profile.first_name or not profile.last_name:
            return Error(Errors.invalid_argument("email, first name and last name are required"))

        write = S.DualWrite(
            name=f"register {profile.email}",
            external=S.from_async(
                lambda: self._identity.create_account(profile, secret),
                on_error=_identity_error,
            ),
            local=lambda uid: S.from_result(lambda: self._save(uid, profile)),
            compensate=self._undo_account,
        )

        match await S.run(write, self._on_orphan):
            case Ok(result):
                logger.info("registered account %s", result.value.uid)
                return Ok(result.value)
            case Error(e):
                return Error(e.surface(external=_PROVIDER_KINDS))

    async def _undo_account(self, uid: str) -> None:
        try:
            await self._identity.delete_account(uid)
        except IdentityNotFound:
            logger.warning("account %s already gone at identity provider, nothing to undo", uid)

    async def _save(self, uid: str, profile: AccountProfile) -> Result[User, PrintlyError]:
        now = datetime.now()
        user = User(
            uid=uid,
            email=profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
            phone_number=profile.phone_number,
            role=Role.USER,
            created_at=now,
            updated_at=now,
        )
        return (await self._users.save(user)).map_err(lambda e: from_store(e, "user", uid))

    async def delete(self, uid: str) -> Result[None, PrintlyError]:
        """
        Provider first, then the local row.

        A provider that no longer knows the account is not an error: the local
        row is still removed. Any other provider failure leaves it untouched.
        """
        try:
            await self._identity.delete_account(uid)
        except IdentityNotFound:
            logger.warning("account %s not found at identity provider, deleting local row", uid)
        except Exception as e:
            return Error(PrintlyError(
                ErrorKind.EXTERNAL_WRITE_FAILED,
                f"failed to delete account {uid} at identity provider",
                _identity_error(e),
            ))

        match await self._users.delete(uid):
            case Ok(_):
                logger.info("deleted account %s", uid)
                return Ok(None)
            case Error(e):
                return Error(from_store(e, "user", uid))

    async def get(self, uid: str) -> Result[User, PrintlyError]:
        match await self._users.find_by_uid(uid):
            case Ok(None):
                return Error(Errors.not_found("user", uid))
            case Ok(user):
                return Ok(user)
            case Error(e):
                return Error(from_store(e, "user", uid))

    async def list(self) -> Result[list[User], PrintlyError]:
        return (await self._users.find_all()).map_err(lambda e: from_store(e, "users", "*"))

    async def update_role(self, uid: str, role: Role) -> Result[User, PrintlyError]:
        return await self._update(uid, {"role": role})

    async def update_profile(self, uid: str, fields: Fields) -> Result[User, PrintlyError]:
        unknown = set(fields) - _PROFILE_FIELDS
        if unknown:
            return Error(Errors.invalid_argument(f"cannot update {sorted(unknown)}"))
        return await self._update(uid, fields)

    async def _update(self, uid: str, fields: Fields) -> Result[User, PrintlyError]:
        changes = {**fields, "updated_at": datetime.now()}
        return (await self._users.update(uid, changes)).map_err(lambda e: from_store(e, "user", uid))


__all__ = ("AccountService",)
