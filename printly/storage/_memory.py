"""In-memory blob store for tests and local development."""

from __future__ import annotations

import asyncio
import itertools

from printly.storage._local import sanitize_file_name
from printly.storage._types import BlobNotFound


class MemoryBlobStore:
    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._seq = itertools.count(1)
        self._lock = asyncio.Lock()

    async def put(self, content: bytes, name: str, owner_uid: str) -> str:
        async with self._lock:
            path = f"{owner_uid}/{next(self._seq)}_{sanitize_file_name(name)}"
            self._blobs[path] = bytes(content)
            return path

    async def delete(self, path: str) -> None:
        async with self._lock:
            if self._blobs.pop(path, None) is None:
                raise BlobNotFound(path)

    def get(self, path: str) -> bytes | None:
        return self._blobs.get(path)

    @property
    def paths(self) -> frozenset[str]:
        return frozenset(self._blobs)

    def __len__(self) -> int:
        return len(self._blobs)


__all__ = ("MemoryBlobStore",)
