"""
Shared fixtures and recording test doubles for the printly test suite.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
import pytest_asyncio

from kungfu import Result, Error

from printly.config import Settings
from printly.domain import AccountProfile, CenterStatus, Order, PrintCenter, User
from printly.identity import MemoryIdentityProvider
from printly.ingest import Upload
from printly.storage import MemoryBlobStore
from printly.store import (
    MemoryCenterStore,
    MemoryOrderStore,
    MemoryUserStore,
    StoreError,
)


# ============================================================================
# Recording doubles
# ============================================================================


class RecordingBlobStore(MemoryBlobStore):
    """MemoryBlobStore that records calls and fails on request."""

    def __init__(self, *, fail_put_at: int | None = None, fail_delete: bool = False) -> None:
        super().__init__()
        self.fail_put_at = fail_put_at
        self.fail_delete = fail_delete
        self.puts: list[str] = []
        self.deletes: list[str] = []

    async def put(self, content: bytes, name: str, owner_uid: str) -> str:
        if self.fail_put_at is not None and len(self.puts) == self.fail_put_at:
            self.puts.append(name)
            raise OSError(f"upload of {name} failed")
        self.puts.append(name)
        return await super().put(content, name, owner_uid)

    async def delete(self, path: str) -> None:
        self.deletes.append(path)
        if self.fail_delete:
            raise OSError(f"cannot delete {path}")
        await super().delete(path)


class RecordingIdentityProvider(MemoryIdentityProvider):
    def __init__(
        self,
        *,
        create_error: Exception | None = None,
        delete_error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.create_error = create_error
        self.delete_error = delete_error
        self.created: list[str] = []
        self.deleted: list[str] = []

    async def create_account(self, profile: AccountProfile, secret: str) -> str:
        if self.create_error is not None:
            raise self.create_error
        uid = await super().create_account(profile, secret)
        self.created.append(uid)
        return uid

    async def delete_account(self, uid: str) -> None:
        self.deleted.append(uid)
        if self.delete_error is not None:
            raise self.delete_error
        await super().delete_account(uid)


class FlakyUserStore(MemoryUserStore):
    def __init__(self, *, save_error: StoreError | None = None) -> None:
        super().__init__()
        self.save_error = save_error

    async def save(self, user: User) -> Result[User, StoreError]:
        if self.save_error is not None:
            return Error(self.save_error)
        return await super().save(user)


class FlakyOrderStore(MemoryOrderStore):
    """
    MemoryOrderStore that rejects the first `duplicates` inserts as code
    collisions, or every insert with save_error.
    """

    def __init__(self, *, duplicates: int = 0, save_error: StoreError | None = None) -> None:
        super().__init__()
        self.duplicates = duplicates
        self.save_error = save_error
        self.saved_codes: list[str] = []

    async def save(self, order: Order) -> Result[Order, StoreError]:
        self.saved_codes.append(order.code)
        if self.save_error is not None:
            return Error(self.save_error)
        if self.duplicates > 0:
            self.duplicates -= 1
            return Error(StoreError.duplicate(f"order code {order.code} already in use"))
        return await super().save(order)


@dataclass
class OrphanRecorder:
    """Reconciliation hook double."""

    calls: list[tuple[str, tuple[str, ...], tuple[tuple[str, BaseException], ...]]] = field(
        default_factory=list
    )

    def __call__(self, name: str, refs: tuple[str, ...], failures: tuple) -> None:
        self.calls.append((name, refs, failures))

    @property
    def refs(self) -> list[str]:
        return [ref for _, refs, _ in self.calls for ref in refs]


# ============================================================================
# Helpers
# ============================================================================


def pdf(name: str = "doc.pdf", size: int = 100_000) -> Upload:
    return Upload(name, "application/pdf", content=b"x" * size)


PROFILE = AccountProfile(
    first_name="Ada",
    last_name="Lovelace",
    email="ada@example.com",
    phone_number="+33600000000",
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def orphans():
    return OrphanRecorder()


@pytest.fixture
def blobs():
    return RecordingBlobStore()


@pytest.fixture
def center_store():
    return MemoryCenterStore()


@pytest_asyncio.fixture
async def approved_center(center_store):
    result = await center_store.save(PrintCenter(
        name="Copy Corner",
        email="desk@copycorner.example",
        status=CenterStatus.APPROVED,
    ))
    return result.unwrap()


@pytest_asyncio.fixture
async def pending_center(center_store):
    result = await center_store.save(PrintCenter(
        name="Print Pending",
        email="hello@pending.example",
        status=CenterStatus.PENDING,
    ))
    return result.unwrap()
