"""
Step construction — lifting collaborator calls into lazy Results.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable, Iterable

from combinators import lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from printly._types import PrintlyError, Errors, Compensator
from printly.saga._compensate import compensate_all, report_orphans
from printly.saga._types import OrphanHook, log_orphans

# ═══════════════════════════════════════════════════════════════════════════════
# from_async() — exception-raising callable → LazyCoroResult
# ═══════════════════════════════════════════════════════════════════════════════


def _internal(e: Exception) -> PrintlyError:
    return Errors.internal(str(e) or type(e).__name__, e)


def from_async[T](
    action: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], PrintlyError] = _internal,
) -> LazyCoroResult[T, PrintlyError]:
    """
    Lift an async collaborator call that raises on failure.

    Example:
        S.from_async(
            lambda: provider.create_account(profile, secret),
            on_error=identity_error,
        )
    """
    return L.catching_async(action, on_error=on_error)


def from_result[T](
    action: Callable[[], Awaitable[Result[T, PrintlyError]]],
) -> LazyCoroResult[T, PrintlyError]:
    """Wrap an async function that already returns a Result."""
    return LazyCoroResult(action)


# ═══════════════════════════════════════════════════════════════════════════════
# stage_each() — sequential multi-item external write
# ═══════════════════════════════════════════════════════════════════════════════


def stage_each[I, R](
    items: Iterable[I],
    put: Callable[[I], LazyCoroResult[R, PrintlyError]],
    delete: Compensator[R],
    *,
    name: str = "stage",
    describe: Callable[[R], str] = str,
    on_orphan: OrphanHook = log_orphans,
) -> LazyCoroResult[tuple[R, ...], PrintlyError]:
    """
    Put items one at a time, accumulating refs.

    If item i fails, the refs of items 0..i-1 are deleted best-effort and the
    put error of item i is returned unchanged.

    Example:
        staged = S.stage_each(uploads, put_upload, blobs.delete, name="ingest")
        paths = await staged
    """
    pending = tuple(items)

    async def _stage() -> Result[tuple[R, ...], PrintlyError]:
        staged: list[R] = []
        for item in pending:
            match await put(item):
                case Ok(ref):
                    staged.append(ref)
                case Error(e):
                    if staged:
                        report = await compensate_all(staged, delete, name=name, describe=describe)
                        report_orphans(name, report, on_orphan)
                    return Error(e)
        return Ok(tuple(staged))

    return LazyCoroResult(_stage)


__all__ = ("from_async", "from_result", "stage_each")
