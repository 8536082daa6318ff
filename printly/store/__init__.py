"""
Store — persistence for orders, centers and users.

    from printly import store as St

    orders = St.MemoryOrderStore()
    session_factory, engine = await St.open_database(settings)
    orders = St.SQLAlchemyOrderStore(session_factory)
"""

from printly.store._types import (
    StoreErrorKind,
    StoreError,
    Fields,
    OrderStore,
    CenterLookup,
    CenterStore,
    UserStore,
)
from printly.store._memory import MemoryOrderStore, MemoryCenterStore, MemoryUserStore
from printly.store._sqlalchemy import (
    Base,
    OrderTable,
    DocumentTable,
    CenterTable,
    UserTable,
    SQLAlchemyOrderStore,
    SQLAlchemyCenterStore,
    SQLAlchemyUserStore,
    create_database,
    open_database,
)

__all__ = (
    # Types
    "StoreErrorKind",
    "StoreError",
    "Fields",
    # Protocols
    "OrderStore",
    "CenterLookup",
    "CenterStore",
    "UserStore",
    # In-memory
    "MemoryOrderStore",
    "MemoryCenterStore",
    "MemoryUserStore",
    # SQLAlchemy
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
