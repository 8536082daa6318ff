"""
Dual-write execution: external, then local, then undo on local failure.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from printly._types import ErrorKind, PrintlyError
from printly.saga._compensate import report_orphans
from printly.saga._types import (
    DualWrite,
    OrphanHook,
    WriteResult,
    WriteError,
    log_orphans,
)

logger = logging.getLogger(__name__)


async def run[R, T](
    write: DualWrite[R, T],
    on_orphan: OrphanHook = log_orphans,
) -> Result[WriteResult[T], WriteError]:
    """
    Execute a dual write.

    - external fails: local is never evaluated; EXTERNAL_WRITE_FAILED.
    - local fails: compensate(ref) runs; LOCAL_WRITE_FAILED whether or not the
      undo succeeded. A failed undo is logged and reported to on_orphan.

    Example:
        match await S.run(write):
            case Ok(r):
                user = r.value
            case Error(e):
                log.warning("rolled back: %s", e.rollback_complete)
                return Error(e.error)
    """
    match await write.external:
        case Error(e):
            return Error(WriteError(PrintlyError(
                ErrorKind.EXTERNAL_WRITE_FAILED,
                f"{write.name}: external write failed",
                e,
            )))
        case Ok(ref):
            return await _write_local(write, ref, on_orphan)


async def _write_local[R, T](
    write: DualWrite[R, T],
    ref: R,
    on_orphan: OrphanHook,
) -> Result[WriteResult[T], WriteError]:
    match await write.local(ref):
        case Ok(value):
            return Ok(WriteResult(value=value, refs=write.describe(ref)))
        case Error(e):
            logger.warning("%s: local write failed, compensating: %s", write.name, e)
            report = await write.compensate_ref(ref)
            report_orphans(write.name, report, on_orphan)
            return Error(WriteError(
                PrintlyError(
                    ErrorKind.LOCAL_WRITE_FAILED,
                    f"{write.name}: local write failed",
                    e,
                ),
                report,
            ))


__all__ = ("run",)
