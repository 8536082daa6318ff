"""
Document ingestion — stage files to blob storage, then persist the order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Awaitable, Sequence
from datetime import datetime

from kungfu import Result, Ok, Error, LazyCoroResult

from printly import saga as S
from printly._types import ErrorKind, Errors, PrintlyError
from printly.domain import Order
from printly.ingest._upload import Upload
from printly.storage import BlobStore

logger = logging.getLogger(__name__)

type Persist = Callable[[Order], Awaitable[Result[Order, PrintlyError]]]
"""Local write: store the order with its staged documents as one unit."""


def attach_paths(order: Order, paths: Sequence[str], when: datetime) -> Order:
    """Pair staged paths with the order's documents, in order."""
    documents = tuple(
        doc.staged_at(path, when)
        for doc, path in zip(order.documents, paths, strict=True)
    )
    return order.with_changes(documents=documents)


class DocumentIngestion:
    def __init__(
        self,
        blobs: BlobStore,
        *,
        on_orphan: S.OrphanHook = S.log_orphans,
    ) -> None:
        self._blobs = blobs
        self._on_orphan = on_orphan

    @property
    def blobs(self) -> BlobStore:
        return self._blobs

    def _put(self, upload: Upload, owner_uid: str) -> LazyCoroResult[str, PrintlyError]:
        async def stage() -> str:
            content = await asyncio.to_thread(upload.read)
            return await self._blobs.put(content, upload.file_name, owner_uid)

        return S.from_async(
            stage,
            on_error=lambda e: PrintlyError(
                ErrorKind.INTERNAL,
                f"failed to stage {upload.file_name}",
                e,
            ),
        )

    async def ingest(
        self,
        order: Order,
        uploads: Sequence[Upload],
        persist: Persist,
    ) -> Result[Order, S.WriteError]:
        """
        Stage every upload, then persist the order with the staged paths.

        Uploads run one at a time. A failed upload deletes the files staged
        before it; a failed persist deletes all of them. uploads[i] belongs to
        order.documents[i].
        """
        if len(uploads) != len(order.documents):
            return Error(S.WriteError(Errors.invalid_argument(
                f"{len(uploads)} uploads for {len(order.documents)} documents",
            )))

        name = f"ingest order {order.code}"
        write = S.DualWrite(
            name=name,
            external=S.stage_each(
                uploads,
                lambda u: self._put(u, order.user_uid),
                self._blobs.delete,
                name=name,
                on_orphan=self._on_orphan,
            ),
            local=lambda paths: S.from_result(
                lambda: persist(attach_paths(order, paths, datetime.now()))
            ),
            compensate=S.compensate_each(self._blobs.delete, name=name),
        )

        match await S.run(write, self._on_orphan):
            case Ok(result):
                logger.info("ingested %d documents for order %s", len(uploads), result.value.code)
                return Ok(result.value)
            case Error(e):
                return Error(e)


__all__ = ("Persist", "attach_paths", "DocumentIngestion")
