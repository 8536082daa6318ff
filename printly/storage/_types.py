"""
Blob storage — where uploaded document bytes live (the "first system" of a
document ingestion).
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    pass


class BlobNotFound(StorageError):
    def __init__(self, path: str) -> None:
        super().__init__(f"blob {path} does not exist")
        self.path = path


class BlobStore(Protocol):
    async def put(self, content: bytes, name: str, owner_uid: str) -> str:
        """Store content and return its storage path."""
        ...

    async def delete(self, path: str) -> None:
        """Raises BlobNotFound when nothing is stored at path."""
        ...


__all__ = ("StorageError", "BlobNotFound", "BlobStore")
