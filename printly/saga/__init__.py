"""
Saga — writes spanning an external system and the local database.

    from printly import saga as S

    write = S.DualWrite(
        name="register",
        external=S.from_async(lambda: provider.create_account(profile, secret)),
        local=lambda uid: S.from_result(lambda: users.save(...)),
        compensate=provider.delete_account,
    )
    result = await S.run(write)

Compensation failures are never returned as the primary error: they are
logged and handed to the on_orphan reconciliation hook.
"""

from __future__ import annotations

from printly.saga._types import (
    Failure,
    CompensationReport,
    CompensationIncomplete,
    OrphanHook,
    log_orphans,
    DualWrite,
    WriteResult,
    WriteError,
)
from printly.saga._compensate import compensate_all, compensate_each, report_orphans
from printly.saga._step import from_async, from_result, stage_each
from printly.saga._run import run

__all__ = (
    "Failure",
    "CompensationReport",
    "CompensationIncomplete",
    "OrphanHook",
    "log_orphans",
    "DualWrite",
    "WriteResult",
    "WriteError",
    "compensate_all",
    "compensate_each",
    "report_orphans",
    "from_async",
    "from_result",
    "stage_each",
    "run",
)
