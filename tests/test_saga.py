"""
Dual-write coordinator: ordering, compensation, reporting and staged
multi-item writes.
"""

from __future__ import annotations

import logging

import pytest

from combinators import lift as L
from kungfu import Ok, Error, LazyCoroResult

from printly import saga as S
from printly._types import ErrorKind, Errors, PrintlyError

from conftest import OrphanRecorder


def ok[T](value: T) -> LazyCoroResult[T, PrintlyError]:
    return L.pure(value)


def fail(error: PrintlyError) -> LazyCoroResult[object, PrintlyError]:
    return L.fail(error)


class Undo:
    def __init__(self, *, raises: Exception | None = None) -> None:
        self.raises = raises
        self.calls: list[object] = []

    async def __call__(self, ref: object) -> None:
        self.calls.append(ref)
        if self.raises is not None:
            raise self.raises


class TestRun:
    @pytest.mark.asyncio
    async def test_success_returns_local_value(self):
        undo = Undo()
        write = S.DualWrite(
            name="w",
            external=ok("ref-1"),
            local=lambda ref: ok(f"row for {ref}"),
            compensate=undo,
        )

        result = await S.run(write)

        assert result.unwrap().value == "row for ref-1"
        assert result.unwrap().refs == ("ref-1",)
        assert undo.calls == []

    @pytest.mark.asyncio
    async def test_external_failure_skips_local(self):
        original = Errors.internal("provider down")
        local_calls: list[object] = []
        undo = Undo()

        def local(ref):
            local_calls.append(ref)
            return ok(ref)

        write = S.DualWrite(name="w", external=fail(original), local=local, compensate=undo)
        result = await S.run(write)

        assert isinstance(result, Error)
        assert result.error.error.kind is ErrorKind.EXTERNAL_WRITE_FAILED
        assert result.error.error.cause is original
        assert local_calls == []
        assert undo.calls == []

    @pytest.mark.asyncio
    async def test_local_failure_compensates(self):
        local_error = Errors.internal("disk full")
        undo = Undo()
        write = S.DualWrite(
            name="w",
            external=ok("ref-1"),
            local=lambda ref: fail(local_error),
            compensate=undo,
        )

        result = await S.run(write)

        assert isinstance(result, Error)
        assert result.error.error.kind is ErrorKind.LOCAL_WRITE_FAILED
        assert result.error.error.cause is local_error
        assert result.error.rollback_complete
        assert undo.calls == ["ref-1"]

    @pytest.mark.asyncio
    async def test_compensation_failure_keeps_local_error(self, caplog):
        local_error = Errors.internal("constraint violated")
        hook = OrphanRecorder()
        write = S.DualWrite(
            name="register",
            external=ok("uid-9"),
            local=lambda ref: fail(local_error),
            compensate=Undo(raises=RuntimeError("provider unreachable")),
        )

        with caplog.at_level(logging.ERROR):
            result = await S.run(write, on_orphan=hook)

        assert result.error.error.kind is ErrorKind.LOCAL_WRITE_FAILED
        assert result.error.error.cause is local_error
        assert not result.error.rollback_complete
        assert result.error.compensation.orphaned == ("uid-9",)

        assert len(hook.calls) == 1
        name, refs, failures = hook.calls[0]
        assert name == "register"
        assert refs == ("uid-9",)
        assert isinstance(failures[0][1], RuntimeError)

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert any("uid-9" in r.getMessage() for r in errors)

    @pytest.mark.asyncio
    async def test_default_hook_logs_orphans(self, caplog):
        write = S.DualWrite(
            name="w",
            external=ok("blob/1"),
            local=lambda ref: fail(Errors.internal("nope")),
            compensate=Undo(raises=OSError("gone")),
        )

        with caplog.at_level(logging.ERROR):
            await S.run(write)

        assert any("manual reconciliation" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_failing_hook_does_not_mask_error(self):
        def broken_hook(name, refs, failures):
            raise RuntimeError("hook crashed")

        write = S.DualWrite(
            name="w",
            external=ok("r"),
            local=lambda ref: fail(Errors.internal("local")),
            compensate=Undo(raises=OSError("gone")),
        )

        result = await S.run(write, on_orphan=broken_hook)
        assert result.error.error.kind is ErrorKind.LOCAL_WRITE_FAILED


class TestSurface:
    def test_external_business_kind_kept(self):
        cause = PrintlyError(ErrorKind.ALREADY_EXISTS, "email taken")
        err = S.WriteError(PrintlyError(ErrorKind.EXTERNAL_WRITE_FAILED, "w", cause))
        assert err.surface(external=frozenset({ErrorKind.ALREADY_EXISTS})) is cause

    def test_unlisted_kind_stays_wrapped(self):
        cause = Errors.internal("boom")
        err = S.WriteError(PrintlyError(ErrorKind.LOCAL_WRITE_FAILED, "w", cause))
        assert err.surface(external=frozenset({ErrorKind.INTERNAL})) is err.error


class TestStageEach:
    @pytest.mark.asyncio
    async def test_stages_all_in_order(self):
        puts: list[str] = []

        def put(item):
            puts.append(item)
            return ok(f"path/{item}")

        result = await S.stage_each(["a", "b", "c"], put, Undo())

        assert result == Ok(("path/a", "path/b", "path/c"))
        assert puts == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_partial_failure_cleans_up_staged(self):
        put_error = Errors.internal("upload 3 failed")
        undo = Undo()
        attempted: list[str] = []

        def put(item):
            attempted.append(item)
            return fail(put_error) if item == "c" else ok(f"path/{item}")

        result = await S.stage_each(["a", "b", "c", "d", "e"], put, undo)

        assert isinstance(result, Error)
        assert result.error is put_error
        assert attempted == ["a", "b", "c"]
        assert sorted(undo.calls) == ["path/a", "path/b"]

    @pytest.mark.asyncio
    async def test_first_item_failure_deletes_nothing(self):
        undo = Undo()
        result = await S.stage_each(["a"], lambda item: fail(Errors.internal("x")), undo)
        assert isinstance(result, Error)
        assert undo.calls == []

    @pytest.mark.asyncio
    async def test_cleanup_failure_reported(self):
        hook = OrphanRecorder()

        def put(item):
            return fail(Errors.internal("x")) if item == "b" else ok(f"path/{item}")

        result = await S.stage_each(
            ["a", "b"], put, Undo(raises=OSError("locked")), on_orphan=hook
        )

        assert isinstance(result, Error)
        assert hook.refs == ["path/a"]


class TestCompensateEach:
    @pytest.mark.asyncio
    async def test_attempts_every_ref(self):
        undo = Undo(raises=OSError("nope"))
        write = S.DualWrite(
            name="ingest",
            external=ok(("p1", "p2", "p3")),
            local=lambda refs: fail(Errors.internal("db down")),
            compensate=S.compensate_each(undo, name="ingest"),
        )

        result = await S.run(write, on_orphan=OrphanRecorder())

        report = result.error.compensation
        assert len(undo.calls) == 3
        assert report.run == 3
        assert report.failed == 3
        assert set(report.orphaned) == {"p1", "p2", "p3"}
