"""
Storage — document bytes.

    from printly import storage

    blobs = storage.LocalBlobStore.from_settings(settings)
    path = await blobs.put(b"%PDF-1.7 ...", "report.pdf", owner_uid="u1")
    await blobs.delete(path)
"""

from printly.storage._types import StorageError, BlobNotFound, BlobStore
from printly.storage._local import sanitize_file_name, unique_file_name, LocalBlobStore
from printly.storage._memory import MemoryBlobStore

__all__ = (
    "StorageError",
    "BlobNotFound",
    "BlobStore",
    "sanitize_file_name",
    "unique_file_name",
    "LocalBlobStore",
    "MemoryBlobStore",
)
