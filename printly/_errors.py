"""Store error → PrintlyError mapping shared by the services."""

from __future__ import annotations

from printly._types import Errors, PrintlyError
from printly.store import StoreError, StoreErrorKind


def from_store(error: StoreError, entity: str, ref: object) -> PrintlyError:
    """NOT_FOUND, DUPLICATE and CONFLICT keep their meaning; anything else is INTERNAL."""
    match error.kind:
        case StoreErrorKind.NOT_FOUND:
            return Errors.not_found(entity, ref)
        case StoreErrorKind.DUPLICATE:
            return Errors.already_exists(entity, ref)
        case StoreErrorKind.CONFLICT:
            return Errors.precondition(f"{entity} {ref} changed concurrently: {error.message}")
        case _:
            return Errors.internal(f"{entity} {ref}: store failure", error)


__all__ = ("from_store",)
