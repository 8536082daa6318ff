"""
Dual-write types — command object, compensation report and outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from kungfu import LazyCoroResult

from printly._types import ErrorKind, PrintlyError, Compensator

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Compensation Report
# ═══════════════════════════════════════════════════════════════════════════════

type Failure = tuple[str, BaseException]
"""(external ref, exception raised while undoing it)."""


@dataclass(frozen=True, slots=True)
class CompensationReport:
    """Outcome of undoing one or more external writes."""

    run: int = 0
    failed: int = 0
    failures: tuple[Failure, ...] = ()

    @property
    def rollback_complete(self) -> bool:
        return self.failed == 0

    @property
    def orphaned(self) -> tuple[str, ...]:
        return tuple(ref for ref, _ in self.failures)

    def merge(self, other: CompensationReport) -> CompensationReport:
        return CompensationReport(
            run=self.run + other.run,
            failed=self.failed + other.failed,
            failures=self.failures + other.failures,
        )


class CompensationIncomplete(Exception):
    """Raised by a multi-ref compensator when some refs could not be undone."""

    def __init__(self, report: CompensationReport) -> None:
        super().__init__(f"{report.failed} of {report.run} compensations failed")
        self.report = report


# ═══════════════════════════════════════════════════════════════════════════════
# Reconciliation Hook
# ═══════════════════════════════════════════════════════════════════════════════

type OrphanHook = Callable[[str, tuple[str, ...], tuple[Failure, ...]], None]
"""Called with (write name, orphaned refs, failures) after a failed undo."""


def log_orphans(name: str, refs: tuple[str, ...], failures: tuple[Failure, ...]) -> None:
    """Default hook: one ERROR line per orphaned ref."""
    for ref, exc in failures:
        logger.error(
            "%s: orphaned external resource %s requires manual reconciliation (%s)",
            name,
            ref,
            exc,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# DualWrite — external write + local write + undo
# ═══════════════════════════════════════════════════════════════════════════════


def _describe_ref(ref: object) -> tuple[str, ...]:
    if isinstance(ref, tuple):
        return tuple(str(r) for r in ref)
    return (str(ref),)


@dataclass(frozen=True, slots=True)
class DualWrite[R, T]:
    """
    One write that must land in two systems.

    external runs first and yields a ref. local receives the ref and writes
    the second system. If local fails, compensate(ref) undoes external.

    Example:
        write = DualWrite(
            name="register",
            external=S.from_async(lambda: provider.create_account(profile, secret)),
            local=lambda uid: LazyCoroResult(lambda: save_user(uid)),
            compensate=provider.delete_account,
        )
        result = await S.run(write)
    """

    name: str
    external: LazyCoroResult[R, PrintlyError]
    local: Callable[[R], LazyCoroResult[T, PrintlyError]]
    compensate: Compensator[R]
    describe: Callable[[R], tuple[str, ...]] = field(default=_describe_ref)

    async def compensate_ref(self, ref: R) -> CompensationReport:
        """Undo the external write. Never raises; failures land in the report."""
        try:
            await self.compensate(ref)
        except CompensationIncomplete as e:
            return e.report
        except Exception as e:
            refs = self.describe(ref)
            for r in refs:
                logger.error("%s: failed to compensate %s: %s", self.name, r, e)
            return CompensationReport(
                run=1,
                failed=1,
                failures=tuple((r, e) for r in refs),
            )
        return CompensationReport(run=1)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class WriteResult[T]:
    value: T
    refs: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class WriteError:
    """
    Failed dual write.

    error.kind is EXTERNAL_WRITE_FAILED or LOCAL_WRITE_FAILED; error.cause is
    the failure of the step itself. A failed undo only shows in compensation.
    """

    error: PrintlyError
    compensation: CompensationReport = CompensationReport()

    @property
    def rollback_complete(self) -> bool:
        return self.compensation.rollback_complete

    def surface(
        self,
        *,
        external: frozenset[ErrorKind] = frozenset(),
        local: frozenset[ErrorKind] = frozenset(),
    ) -> PrintlyError:
        """
        Error to hand to the caller.

        A step failure whose kind is listed for its stage is returned as is,
        so business outcomes keep their kind. Anything else stays wrapped.
        """
        keep = external if self.error.kind is ErrorKind.EXTERNAL_WRITE_FAILED else local
        cause = self.error.cause
        if isinstance(cause, PrintlyError) and cause.kind in keep:
            return cause
        return self.error


__all__ = (
    "Failure",
    "CompensationReport",
    "CompensationIncomplete",
    "OrphanHook",
    "log_orphans",
    "DualWrite",
    "WriteResult",
    "WriteError",
)
