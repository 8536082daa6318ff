"""
SQLAlchemy stores — async persistence for orders, centers and users.

Usage:
    session_factory, engine = await open_database(settings)  # PRINTLY_DB_URL

    orders = SQLAlchemyOrderStore(session_factory)
    result = await orders.save(order)

The UNIQUE constraint on orders.code is the authoritative pickup-code guard:
a unique violation on that column surfaces as StoreErrorKind.DUPLICATE, any
other integrity failure as BACKEND.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    event,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from kungfu import Result, Ok, Error

from printly.domain import (
    CenterStatus,
    ColorMode,
    Document,
    Order,
    OrderStatus,
    PaperSize,
    PrintCenter,
    PrintMode,
    PrintOptions,
    Role,
    User,
)
from printly.store._types import StoreError, Fields

if TYPE_CHECKING:
    from printly.config import Settings


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class OrderTable(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    user_uid: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    center_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    print_mode: Mapped[str] = mapped_column(String(32), nullable=False)

    # Pricing
    total_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    pickup_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Audit
    created_by: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    updated_by: Mapped[str] = mapped_column(String(128), nullable=False, default="")

    documents: Mapped[list[DocumentTable]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="DocumentTable.id",
    )


class DocumentTable(Base):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    # Print options (embedded)
    print_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    print_pages: Mapped[str] = mapped_column(String(255), nullable=False)
    print_color: Mapped[str] = mapped_column(String(16), nullable=False)
    print_paper_size: Mapped[str] = mapped_column(String(8), nullable=False)
    print_double_sided: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    uploaded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    printed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    storage_deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    order: Mapped[OrderTable] = relationship(back_populates="documents")


class CenterTable(Base):
    __tablename__ = "print_centers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    owner_uid: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class UserTable(Base):
    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    first_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    center_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Row ↔ domain mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _column_value(value: object) -> object:
    return value.value if isinstance(value, Enum) else value


def _document_row(doc: Document) -> DocumentTable:
    opts = doc.print_options
    return DocumentTable(
        file_name=doc.file_name,
        mime_type=doc.mime_type,
        size=doc.size,
        storage_path=doc.storage_path,
        print_copies=opts.copies,
        print_pages=opts.pages,
        print_color=opts.color.value,
        print_paper_size=opts.paper_size.value,
        print_double_sided=opts.double_sided,
        uploaded_at=doc.uploaded_at,
        printed_at=doc.printed_at,
        storage_deleted_at=doc.storage_deleted_at,
    )


def _document(row: DocumentTable) -> Document:
    return Document(
        id=row.id,
        order_id=row.order_id,
        file_name=row.file_name,
        mime_type=row.mime_type,
        size=row.size,
        storage_path=row.storage_path,
        print_options=PrintOptions(
            copies=row.print_copies,
            pages=row.print_pages,
            color=ColorMode(row.print_color),
            paper_size=PaperSize(row.print_paper_size),
            double_sided=row.print_double_sided,
        ),
        uploaded_at=row.uploaded_at,
        printed_at=row.printed_at,
        storage_deleted_at=row.storage_deleted_at,
    )


def _order_row(order: Order, now: datetime) -> OrderTable:
    return OrderTable(
        code=order.code,
        user_uid=order.user_uid,
        center_id=order.center_id,
        status=order.status.value,
        print_mode=order.print_mode.value,
        total_cost=order.total_cost,
        currency=order.currency,
        created_at=order.created_at or now,
        updated_at=order.updated_at or now,
        paid_at=order.paid_at,
        pickup_time=order.pickup_time,
        cancelled_at=order.cancelled_at,
        created_by=order.created_by,
        updated_by=order.updated_by,
        documents=[_document_row(d) for d in order.documents],
    )


def _order(row: OrderTable) -> Order:
    return Order(
        id=row.id,
        code=row.code,
        user_uid=row.user_uid,
        center_id=row.center_id,
        status=OrderStatus(row.status),
        print_mode=PrintMode(row.print_mode),
        total_cost=row.total_cost,
        currency=row.currency,
        created_at=row.created_at,
        updated_at=row.updated_at,
        paid_at=row.paid_at,
        pickup_time=row.pickup_time,
        cancelled_at=row.cancelled_at,
        created_by=row.created_by,
        updated_by=row.updated_by,
        documents=tuple(_document(d) for d in row.documents),
    )


def _center(row: CenterTable) -> PrintCenter:
    return PrintCenter(
        id=row.id,
        name=row.name,
        email=row.email,
        phone_number=row.phone_number,
        owner_uid=row.owner_uid,
        status=CenterStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _user(row: UserTable) -> User:
    return User(
        uid=row.uid,
        role=Role(row.role),
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        phone_number=row.phone_number,
        center_id=row.center_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _values(
    row: Base,
    fields: Fields,
    immutable: frozenset[str] = frozenset(),
) -> Result[dict[str, object], StoreError]:
    """Column values for an update of row, or BACKEND for bad field names."""
    columns = set(row.__table__.columns.keys())  # type: ignore[attr-defined]
    unknown = set(fields) - columns
    if unknown:
        return Error(StoreError.backend(f"unknown fields: {sorted(unknown)}"))

    values: dict[str, object] = {}
    for name, value in fields.items():
        if name in immutable and getattr(row, name) != value:
            return Error(StoreError.backend(f"{name} is immutable"))
        values[name] = _column_value(value)
    return Ok(values)


def _assign(row: Base, fields: Fields, immutable: frozenset[str] = frozenset()) -> StoreError | None:
    match _values(row, fields, immutable):
        case Ok(values):
            for name, value in values.items():
                setattr(row, name, value)
            return None
        case Error(e):
            return e


def _unique_violation(error: IntegrityError, table: str, column: str) -> bool:
    """
    True when error is a unique violation on table.column.

    Matches the sqlite ("UNIQUE constraint failed: orders.code") and
    PostgreSQL ("duplicate key value ... Key (code)=") driver messages.
    """
    message = str(error.orig)
    if "UNIQUE constraint failed" in message:
        return f"{table}.{column}" in message
    if "duplicate key value" in message:
        return f"({column})=" in message
    return False


# ═══════════════════════════════════════════════════════════════════════════════
# Base store — session + error mapping
# ═══════════════════════════════════════════════════════════════════════════════


class _SessionStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _select[M, T](
        self,
        model: type[M],
        convert: Callable[[M], T],
        *where: Any,
    ) -> Result[list[T], StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = select(model)
                if where:
                    stmt = stmt.where(*where)
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([convert(r) for r in rows])
        except Exception as e:
            return Error(StoreError.backend(f"Failed to query {model.__name__}: {e}", e))

    async def _first[M, T](
        self,
        model: type[M],
        convert: Callable[[M], T],
        *where: Any,
    ) -> Result[T | None, StoreError]:
        match await self._select(model, convert, *where):
            case Ok(items):
                return Ok(items[0] if items else None)
            case Error(e):
                return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# Order Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyOrderStore(_SessionStore):
    async def save(self, order: Order) -> Result[Order, StoreError]:
        try:
            async with self._session_factory() as session:
                row = _order_row(order, datetime.now())
                session.add(row)
                await session.commit()
                return Ok(_order(row))
        except IntegrityError as e:
            if _unique_violation(e, "orders", "code"):
                return Error(StoreError.duplicate(f"order code {order.code} already in use", e))
            return Error(StoreError.backend(f"Failed to save order: {e}", e))
        except Exception as e:
            return Error(StoreError.backend(f"Failed to save order: {e}", e))

    async def find_by_id(self, order_id: int) -> Result[Order | None, StoreError]:
        return await self._first(OrderTable, _order, OrderTable.id == order_id)

    async def find_by_code(self, code: str) -> Result[Order | None, StoreError]:
        return await self._first(OrderTable, _order, OrderTable.code == code)

    async def update(
        self,
        order_id: int,
        fields: Fields,
        *,
        expected_status: OrderStatus | None = None,
    ) -> Result[Order, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return Error(StoreError.not_found(f"order {order_id} not found"))

                match _values(row, fields, immutable=frozenset({"code"})):
                    case Ok(values):
                        pass
                    case Error(e):
                        return Error(e)

                if expected_status is not None and row.status != expected_status.value:
                    return Error(StoreError.conflict(
                        f"order {order_id} is {row.status}, expected {expected_status.value}"
                    ))

                if values:
                    # Status guard and write in one UPDATE so a concurrent move cannot slip in between.
                    conditions = [OrderTable.id == order_id]
                    if expected_status is not None:
                        conditions.append(OrderTable.status == expected_status.value)
                    stmt = (
                        update(OrderTable)
                        .where(*conditions)
                        .values(values)
                        .execution_options(synchronize_session=False)
                    )
                    if (await session.execute(stmt)).rowcount == 0:
                        await session.rollback()
                        return Error(StoreError.conflict(f"order {order_id} changed during update"))

                await session.commit()
                fresh = await session.get(OrderTable, order_id, populate_existing=True)
                if fresh is None:
                    return Error(StoreError.not_found(f"order {order_id} not found"))
                return Ok(_order(fresh))
        except Exception as e:
            return Error(StoreError.backend(f"Failed to update order {order_id}: {e}", e))

    async def delete(self, order_id: int) -> Result[Order, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return Error(StoreError.not_found(f"order {order_id} not found"))

                removed = _order(row)
                await session.delete(row)
                await session.commit()
                return Ok(removed)
        except Exception as e:
            return Error(StoreError.backend(f"Failed to delete order {order_id}: {e}", e))

    async def find_all(self) -> Result[list[Order], StoreError]:
        return await self._select(OrderTable, _order)

    async def find_by_center(self, center_id: int) -> Result[list[Order], StoreError]:
        return await self._select(OrderTable, _order, OrderTable.center_id == center_id)

    async def find_by_user(self, user_uid: str) -> Result[list[Order], StoreError]:
        return await self._select(OrderTable, _order, OrderTable.user_uid == user_uid)

    async def find_by_status(self, status: OrderStatus) -> Result[list[Order], StoreError]:
        return await self._select(OrderTable, _order, OrderTable.status == status.value)


# ═══════════════════════════════════════════════════════════════════════════════
# Center Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyCenterStore(_SessionStore):
    async def save(self, center: PrintCenter) -> Result[PrintCenter, StoreError]:
        try:
            async with self._session_factory() as session:
                now = datetime.now()
                row = CenterTable(
                    name=center.name,
                    email=center.email,
                    phone_number=center.phone_number,
                    owner_uid=center.owner_uid,
                    status=center.status.value,
                    created_at=center.created_at or now,
                    updated_at=center.updated_at or now,
                )
                if center.id is not None:
                    row.id = center.id
                session.add(row)
                await session.commit()
                return Ok(_center(row))
        except IntegrityError as e:
            return Error(StoreError.duplicate(f"center {center.id} already exists", e))
        except Exception as e:
            return Error(StoreError.backend(f"Failed to save center: {e}", e))

    async def find_by_id(self, center_id: int) -> Result[PrintCenter | None, StoreError]:
        return await self._first(CenterTable, _center, CenterTable.id == center_id)

    async def update(self, center_id: int, fields: Fields) -> Result[PrintCenter, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CenterTable, center_id)
                if row is None:
                    return Error(StoreError.not_found(f"center {center_id} not found"))
                problem = _assign(row, fields)
                if problem is not None:
                    return Error(problem)
                await session.commit()
                return Ok(_center(row))
        except Exception as e:
            return Error(StoreError.backend(f"Failed to update center {center_id}: {e}", e))

    async def delete(self, center_id: int) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(CenterTable, center_id)
                if row is None:
                    return Error(StoreError.not_found(f"center {center_id} not found"))
                await session.delete(row)
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StoreError.backend(f"Failed to delete center {center_id}: {e}", e))

    async def find_all(self) -> Result[list[PrintCenter], StoreError]:
        return await self._select(CenterTable, _center)

    async def find_by_status(self, status: CenterStatus) -> Result[list[PrintCenter], StoreError]:
        return await self._select(CenterTable, _center, CenterTable.status == status.value)


# ═══════════════════════════════════════════════════════════════════════════════
# User Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyUserStore(_SessionStore):
    async def save(self, user: User) -> Result[User, StoreError]:
        try:
            async with self._session_factory() as session:
                now = datetime.now()
                row = UserTable(
                    uid=user.uid,
                    role=user.role.value,
                    email=user.email,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    phone_number=user.phone_number,
                    center_id=user.center_id,
                    created_at=user.created_at or now,
                    updated_at=user.updated_at or now,
                )
                session.add(row)
                await session.commit()
                return Ok(_user(row))
        except IntegrityError as e:
            return Error(StoreError.duplicate(f"user {user.uid} already exists", e))
        except Exception as e:
            return Error(StoreError.backend(f"Failed to save user: {e}", e))

    async def find_by_uid(self, uid: str) -> Result[User | None, StoreError]:
        return await self._first(UserTable, _user, UserTable.uid == uid)

    async def update(self, uid: str, fields: Fields) -> Result[User, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(UserTable, uid)
                if row is None:
                    return Error(StoreError.not_found(f"user {uid} not found"))
                problem = _assign(row, fields, immutable=frozenset({"uid"}))
                if problem is not None:
                    return Error(problem)
                await session.commit()
                return Ok(_user(row))
        except Exception as e:
            return Error(StoreError.backend(f"Failed to update user {uid}: {e}", e))

    async def delete(self, uid: str) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(UserTable, uid)
                if row is None:
                    return Error(StoreError.not_found(f"user {uid} not found"))
                await session.delete(row)
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StoreError.backend(f"Failed to delete user {uid}: {e}", e))

    async def find_all(self) -> Result[list[User], StoreError]:
        return await self._select(UserTable, _user)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create database and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


async def open_database(
    settings: Settings,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """create_database() against settings.db_url (PRINTLY_DB_URL)."""
    return await create_database(settings.db_url)


__all__ = (
    "Base",
    "OrderTable",
    "DocumentTable",
    "CenterTable",
    "UserTable",
    "SQLAlchemyOrderStore",
    "SQLAlchemyCenterStore",
    "SQLAlchemyUserStore",
    "create_database",
    "open_database",
)
