"""
Order domain — orders, documents and print options.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(str, Enum):
    CREATED = "CREATED"
    AWAITING_DOCUMENT = "AWAITING_DOCUMENT"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    AWAITING_USER = "AWAITING_USER"
    READY_TO_PRINT = "READY_TO_PRINT"
    PRINTING = "PRINTING"
    PRINTED = "PRINTED"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class ColorMode(str, Enum):
    COLOR = "COLOR"
    BLACK_AND_WHITE = "BLACK_AND_WHITE"


class PaperSize(str, Enum):
    A3 = "A3"
    A4 = "A4"
    A5 = "A5"
    A6 = "A6"


class PrintMode(str, Enum):
    PRE_PRINT = "PRE_PRINT"
    PRINT_UPON_ARRIVAL = "PRINT_UPON_ARRIVAL"


# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MIN_DOCUMENT_SIZE = 1
MAX_DOCUMENT_SIZE = 52_428_800  # 50MB
MIN_COPIES = 1
MAX_COPIES = 100


# ═══════════════════════════════════════════════════════════════════════════════
# Document
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PrintOptions:
    copies: int = 1
    pages: str = "all"  # e.g. "1-3,5"
    color: ColorMode = ColorMode.BLACK_AND_WHITE
    paper_size: PaperSize = PaperSize.A4
    double_sided: bool = True


@dataclass(frozen=True, slots=True)
class Document:
    """
    One uploaded file plus its print configuration.

    storage_path is empty until the file has been staged to blob storage.
    """

    file_name: str
    mime_type: str
    size: int
    print_options: PrintOptions = field(default_factory=PrintOptions)
    id: int | None = None
    order_id: int | None = None
    storage_path: str = ""
    uploaded_at: datetime | None = None
    printed_at: datetime | None = None
    storage_deleted_at: datetime | None = None

    @property
    def is_staged(self) -> bool:
        return bool(self.storage_path) and self.storage_deleted_at is None

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"

    @property
    def is_image(self) -> bool:
        return self.mime_type in ("image/jpeg", "image/png", "image/gif")

    def staged_at(self, path: str, when: datetime) -> Document:
        return replace(self, storage_path=path, uploaded_at=when)


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    code: str
    user_uid: str
    center_id: int
    status: OrderStatus
    id: int | None = None
    print_mode: PrintMode = PrintMode.PRE_PRINT

    # Pricing
    total_cost: int = 0  # minor currency units
    currency: str = "EUR"

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None
    paid_at: datetime | None = None
    pickup_time: datetime | None = None
    cancelled_at: datetime | None = None

    # Audit
    created_by: str = ""
    updated_by: str = ""

    documents: tuple[Document, ...] = ()

    def owned_by(self, uid: str) -> bool:
        return self.user_uid == uid

    def with_changes(self, **changes: object) -> Order:
        return replace(self, **changes)  # type: ignore[arg-type]

    @property
    def storage_paths(self) -> tuple[str, ...]:
        return tuple(d.storage_path for d in self.documents if d.is_staged)


__all__ = (
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
)
