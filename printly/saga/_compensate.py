"""
Compensation — best-effort undo of external writes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from printly._types import ErrorKind, PrintlyError, Compensator
from printly.saga._types import (
    CompensationReport,
    CompensationIncomplete,
    OrphanHook,
)

logger = logging.getLogger(__name__)


async def compensate_all[R](
    refs: Iterable[R],
    compensate: Compensator[R],
    *,
    name: str,
    describe: Callable[[R], str] = str,
) -> CompensationReport:
    """
    Undo refs in reverse order. Every ref is attempted; failures are logged
    and collected, never raised.
    """
    run = 0
    failures: list[tuple[str, BaseException]] = []

    for ref in reversed(list(refs)):
        run += 1
        try:
            await compensate(ref)
        except Exception as e:
            logger.error("%s: failed to compensate %s: %s", name, describe(ref), e)
            failures.append((describe(ref), e))

    return CompensationReport(run=run, failed=len(failures), failures=tuple(failures))


def compensate_each[R](
    compensate: Compensator[R],
    *,
    name: str,
    describe: Callable[[R], str] = str,
) -> Compensator[tuple[R, ...]]:
    """
    Lift a single-ref compensator to a tuple of refs.

    Partial failure raises CompensationIncomplete carrying the per-ref report,
    which DualWrite.compensate_ref unwraps.
    """

    async def undo(refs: tuple[R, ...]) -> None:
        report = await compensate_all(refs, compensate, name=name, describe=describe)
        if not report.rollback_complete:
            raise CompensationIncomplete(report)

    return undo


def report_orphans(name: str, report: CompensationReport, on_orphan: OrphanHook) -> None:
    """Log a failed rollback and hand the orphaned refs to the reconciliation hook."""
    if report.rollback_complete:
        return

    error = PrintlyError(
        ErrorKind.COMPENSATION_FAILED,
        f"{name}: {report.failed} of {report.run} compensations failed, "
        f"manual reconciliation required for {', '.join(report.orphaned)}",
    )
    logger.error("%s", error)

    try:
        on_orphan(name, report.orphaned, report.failures)
    except Exception:
        logger.exception("%s: reconciliation hook failed", name)


__all__ = ("compensate_all", "compensate_each", "report_orphans")
