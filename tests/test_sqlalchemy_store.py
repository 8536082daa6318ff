"""
SQLAlchemy stores against a throwaway sqlite database.
"""

from __future__ import annotations

from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from printly.domain import (
    CenterStatus,
    ColorMode,
    Document,
    Order,
    OrderStatus,
    PaperSize,
    PrintCenter,
    PrintOptions,
    Role,
    User,
)
from printly.config import Settings
from printly.store import (
    DocumentTable,
    MemoryOrderStore,
    SQLAlchemyCenterStore,
    SQLAlchemyOrderStore,
    SQLAlchemyUserStore,
    StoreErrorKind,
    create_database,
    open_database,
)


@pytest_asyncio.fixture
async def database(tmp_path):
    session_factory, engine = await create_database(f"sqlite+aiosqlite:///{tmp_path / 'printly.db'}")
    yield session_factory
    await engine.dispose()


def new_order(code: str = "ABC123", user_uid: str = "u1", center_id: int = 1) -> Order:
    return Order(
        code=code,
        user_uid=user_uid,
        center_id=center_id,
        status=OrderStatus.PENDING_PAYMENT,
        total_cost=72,
        created_by=user_uid,
        updated_by=user_uid,
        documents=(
            Document(
                "a.pdf",
                "application/pdf",
                100_000,
                PrintOptions(copies=2, color=ColorMode.COLOR, paper_size=PaperSize.A3),
                storage_path="u1/a.pdf",
                uploaded_at=datetime(2024, 5, 1, 12, 0),
            ),
            Document("b.png", "image/png", 2_000, storage_path="u1/b.png"),
        ),
    )


async def document_rows(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(DocumentTable))).scalar_one()


class TestOrderStore:
    @pytest.mark.asyncio
    async def test_round_trip(self, database):
        store = SQLAlchemyOrderStore(database)

        saved = (await store.save(new_order())).unwrap()
        loaded = (await store.find_by_id(saved.id)).unwrap()

        assert loaded == saved
        assert saved.id is not None
        assert [d.order_id for d in saved.documents] == [saved.id, saved.id]
        assert saved.documents[0].print_options.color is ColorMode.COLOR
        assert saved.documents[0].print_options.paper_size is PaperSize.A3
        assert saved.documents[1].print_options == PrintOptions()
        assert saved.created_at is not None

    @pytest.mark.asyncio
    async def test_find_by_code(self, database):
        store = SQLAlchemyOrderStore(database)
        saved = (await store.save(new_order("ZZZ999"))).unwrap()

        assert (await store.find_by_code("ZZZ999")).unwrap() == saved
        assert (await store.find_by_code("NOPE00")).unwrap() is None

    @pytest.mark.asyncio
    async def test_duplicate_code(self, database):
        store = SQLAlchemyOrderStore(database)
        await store.save(new_order("DUP111"))

        result = await store.save(new_order("DUP111", user_uid="u2"))

        assert result.error.kind is StoreErrorKind.DUPLICATE
        assert len((await store.find_all()).unwrap()) == 1
        assert await document_rows(database) == 2

    @pytest.mark.asyncio
    async def test_other_constraint_violations_are_backend_errors(self, database):
        store = SQLAlchemyOrderStore(database)

        result = await store.save(new_order(code=None))

        assert result.error.kind is StoreErrorKind.BACKEND
        assert (await store.find_all()).unwrap() == []

    @pytest.mark.asyncio
    async def test_update(self, database):
        store = SQLAlchemyOrderStore(database)
        saved = (await store.save(new_order())).unwrap()
        now = datetime.now()

        updated = (await store.update(saved.id, {
            "status": OrderStatus.PAID,
            "updated_by": "manager-1",
            "paid_at": now,
        })).unwrap()

        assert updated.status is OrderStatus.PAID
        assert updated.updated_by == "manager-1"
        assert updated.paid_at == now
        assert updated.documents == saved.documents

    @pytest.mark.asyncio
    async def test_update_rejects_code_change_and_unknown_fields(self, database):
        store = SQLAlchemyOrderStore(database)
        saved = (await store.save(new_order())).unwrap()

        assert (await store.update(saved.id, {"code": "OTHER1"})).error.kind is StoreErrorKind.BACKEND
        assert (await store.update(saved.id, {"colour": "red"})).error.kind is StoreErrorKind.BACKEND

    @pytest.mark.asyncio
    async def test_update_missing(self, database):
        result = await SQLAlchemyOrderStore(database).update(42, {"status": OrderStatus.PAID})
        assert result.error.kind is StoreErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_cascades_to_documents(self, database):
        store = SQLAlchemyOrderStore(database)
        saved = (await store.save(new_order())).unwrap()
        assert await document_rows(database) == 2

        removed = (await store.delete(saved.id)).unwrap()

        assert removed.storage_paths == ("u1/a.pdf", "u1/b.png")
        assert (await store.find_by_id(saved.id)).unwrap() is None
        assert await document_rows(database) == 0

    @pytest.mark.asyncio
    async def test_delete_missing(self, database):
        result = await SQLAlchemyOrderStore(database).delete(42)
        assert result.error.kind is StoreErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_filters(self, database):
        store = SQLAlchemyOrderStore(database)
        a = (await store.save(new_order("AAA111", user_uid="u1", center_id=1))).unwrap()
        b = (await store.save(new_order("BBB222", user_uid="u2", center_id=2))).unwrap()
        await store.update(b.id, {"status": OrderStatus.CANCELLED})

        assert [o.id for o in (await store.find_by_user("u1")).unwrap()] == [a.id]
        assert [o.id for o in (await store.find_by_center(2)).unwrap()] == [b.id]
        assert [o.id for o in (await store.find_by_status(OrderStatus.CANCELLED)).unwrap()] == [b.id]


class TestCenterStore:
    @pytest.mark.asyncio
    async def test_round_trip_and_status(self, database):
        store = SQLAlchemyCenterStore(database)
        center = (await store.save(PrintCenter(name="Copy Corner", email="c@example.com"))).unwrap()

        assert center.status is CenterStatus.PENDING
        assert (await store.find_by_id(center.id)).unwrap() == center

        approved = (await store.update(center.id, {"status": CenterStatus.APPROVED})).unwrap()
        assert approved.accepts_orders
        assert [c.id for c in (await store.find_by_status(CenterStatus.APPROVED)).unwrap()] == [center.id]

    @pytest.mark.asyncio
    async def test_delete(self, database):
        store = SQLAlchemyCenterStore(database)
        center = (await store.save(PrintCenter(name="X", email="x@example.com"))).unwrap()

        assert (await store.delete(center.id)).unwrap() is None
        assert (await store.delete(center.id)).error.kind is StoreErrorKind.NOT_FOUND


class TestUserStore:
    @pytest.mark.asyncio
    async def test_round_trip(self, database):
        store = SQLAlchemyUserStore(database)
        user = (await store.save(User(uid="uid-1", email="a@example.com", first_name="Ada"))).unwrap()

        assert (await store.find_by_uid("uid-1")).unwrap() == user
        assert (await store.find_all()).unwrap() == [user]

    @pytest.mark.asyncio
    async def test_duplicate_uid(self, database):
        store = SQLAlchemyUserStore(database)
        await store.save(User(uid="uid-1", email="a@example.com"))

        result = await store.save(User(uid="uid-1", email="b@example.com"))

        assert result.error.kind is StoreErrorKind.DUPLICATE

    @pytest.mark.asyncio
    async def test_update_role_and_delete(self, database):
        store = SQLAlchemyUserStore(database)
        await store.save(User(uid="uid-1", email="a@example.com"))

        updated = (await store.update("uid-1", {"role": Role.ADMIN})).unwrap()
        assert updated.role is Role.ADMIN

        await store.delete("uid-1")
        assert (await store.find_by_uid("uid-1")).unwrap() is None


class TestGuardedUpdate:
    @pytest_asyncio.fixture(params=["memory", "sqlalchemy"])
    async def store(self, request, database):
        if request.param == "memory":
            return MemoryOrderStore()
        return SQLAlchemyOrderStore(database)

    @pytest.mark.asyncio
    async def test_writes_while_status_matches(self, store):
        saved = (await store.save(new_order())).unwrap()

        updated = (await store.update(
            saved.id,
            {"status": OrderStatus.PAID},
            expected_status=OrderStatus.PENDING_PAYMENT,
        )).unwrap()

        assert updated.status is OrderStatus.PAID

    @pytest.mark.asyncio
    async def test_stale_status_is_a_conflict(self, store):
        saved = (await store.save(new_order())).unwrap()
        await store.update(saved.id, {"status": OrderStatus.PAID})

        result = await store.update(
            saved.id,
            {"status": OrderStatus.CANCELLED, "cancelled_at": datetime.now()},
            expected_status=OrderStatus.PENDING_PAYMENT,
        )

        assert result.error.kind is StoreErrorKind.CONFLICT
        current = (await store.find_by_id(saved.id)).unwrap()
        assert current.status is OrderStatus.PAID
        assert current.cancelled_at is None

    @pytest.mark.asyncio
    async def test_missing_order_is_not_found(self, store):
        result = await store.update(42, {"status": OrderStatus.PAID}, expected_status=OrderStatus.PENDING_PAYMENT)
        assert result.error.kind is StoreErrorKind.NOT_FOUND


class TestOpenDatabase:
    @pytest.mark.asyncio
    async def test_uses_configured_url(self, tmp_path):
        path = tmp_path / "configured.db"
        settings = Settings(_env_file=None, db_url=f"sqlite+aiosqlite:///{path}")

        session_factory, engine = await open_database(settings)
        try:
            saved = (await SQLAlchemyOrderStore(session_factory).save(new_order())).unwrap()
            assert saved.id is not None
        finally:
            await engine.dispose()

        assert path.exists()
