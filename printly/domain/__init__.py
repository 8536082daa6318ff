"""
Domain — orders, documents, print centers and accounts.

    from printly import domain as D

    order = D.Order(code="AB12CD", user_uid="u1", center_id=1,
                    status=D.OrderStatus.PENDING_PAYMENT)
"""

from printly.domain._order import (
    OrderStatus,
    ColorMode,
    PaperSize,
    PrintMode,
    MIN_DOCUMENT_SIZE,
    MAX_DOCUMENT_SIZE,
    MIN_COPIES,
    MAX_COPIES,
    PrintOptions,
    Document,
    Order,
)
from printly.domain._center import CenterStatus, PrintCenter
from printly.domain._account import Role, AccountProfile, User, Actor

__all__ = (
    # Orders
    "OrderStatus",
    "ColorMode",
    "PaperSize",
    "PrintMode",
    "MIN_DOCUMENT_SIZE",
    "MAX_DOCUMENT_SIZE",
    "MIN_COPIES",
    "MAX_COPIES",
    "PrintOptions",
    "Document",
    "Order",
    # Centers
    "CenterStatus",
    "PrintCenter",
    # Accounts
    "Role",
    "AccountProfile",
    "User",
    "Actor",
)
