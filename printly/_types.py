"""
Core types for printly.

Re-exports from kungfu/combinators + the platform error taxonomy.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

if TYPE_CHECKING:
    from printly.store import StoreError

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Error Kinds
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """
    Closed set of failure kinds.

    Value is the platform error code a transport layer reports.
    """

    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    PRECONDITION_FAILED = "FAILED_PRECONDITION"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    EXTERNAL_WRITE_FAILED = "EXTERNAL_WRITE_FAILED"
    LOCAL_WRITE_FAILED = "LOCAL_WRITE_FAILED"
    COMPENSATION_FAILED = "COMPENSATION_FAILED"
    UNAUTHORIZED = "PERMISSION_DENIED"
    INTERNAL = "INTERNAL"

    @property
    def code(self) -> str:
        return self.value


# ═══════════════════════════════════════════════════════════════════════════════
# PrintlyError — tagged failure
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PrintlyError:
    """
    Failure carried on every Error result.

    Note: cause is either another PrintlyError (wrapped context),
    the StoreError of a failed store call, or the exception raised
    by an external collaborator.
    """

    kind: ErrorKind
    message: str
    cause: PrintlyError | StoreError | BaseException | None = None

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"

    def root(self) -> PrintlyError:
        """Innermost PrintlyError in the cause chain."""
        current = self
        while isinstance(current.cause, PrintlyError):
            current = current.cause
        return current

    def wrap(self, kind: ErrorKind, message: str) -> PrintlyError:
        """Wrap self as the cause of a new error."""
        return PrintlyError(kind, message, self)


class Errors:
    """Constructors for common failures."""

    @staticmethod
    def not_found(entity: str, ref: object) -> PrintlyError:
        return PrintlyError(ErrorKind.NOT_FOUND, f"{entity} {ref} not found")

    @staticmethod
    def already_exists(entity: str, ref: object) -> PrintlyError:
        return PrintlyError(ErrorKind.ALREADY_EXISTS, f"{entity} {ref} already exists")

    @staticmethod
    def invalid_argument(msg: str) -> PrintlyError:
        return PrintlyError(ErrorKind.INVALID_ARGUMENT, msg)

    @staticmethod
    def precondition(msg: str) -> PrintlyError:
        return PrintlyError(ErrorKind.PRECONDITION_FAILED, msg)

    @staticmethod
    def unauthorized(msg: str) -> PrintlyError:
        return PrintlyError(ErrorKind.UNAUTHORIZED, msg)

    @staticmethod
    def internal(msg: str, cause: PrintlyError | StoreError | BaseException | None = None) -> PrintlyError:
        return PrintlyError(ErrorKind.INTERNAL, msg, cause)


# ═══════════════════════════════════════════════════════════════════════════════
# Compensator Type (for dual writes)
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[R] = Callable[[R], Awaitable[None]]
"""A compensation action that undoes an external write given its reference."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    # Errors
    "ErrorKind",
    "PrintlyError",
    "Errors",
    # Saga types
    "Compensator",
)
