"""
Filesystem blob store.

Layout: <base_path>/<owner_uid>/<name>_<owner_uid>_<unix ts>_<16 hex>.<ext>
The returned storage path is relative to base_path.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from pathlib import Path
from typing import TYPE_CHECKING

from printly.storage._types import StorageError, BlobNotFound

if TYPE_CHECKING:
    from printly.config import Settings

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-zA-Z0-9._-]+")


def sanitize_file_name(name: str) -> str:
    """
    Make a client-supplied file name safe to store.

    Example:
        sanitize_file_name("my report (final).pdf")  # "my_report_final_.pdf"
    """
    cleaned = _UNSAFE.sub("_", name).replace("__", "_").strip("_.")
    return cleaned or "file"


def unique_file_name(name: str, owner_uid: str) -> str:
    path = Path(sanitize_file_name(name))
    suffix = path.suffix
    base = path.name[: -len(suffix)] if suffix else path.name
    return f"{base}_{owner_uid}_{int(time.time())}_{secrets.token_hex(8)}{suffix}"


class LocalBlobStore:
    def __init__(self, base_path: str | Path, base_url: str = "") -> None:
        self._base = Path(base_path).resolve()
        self._base_url = base_url.rstrip("/")
        self._base.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalBlobStore:
        return cls(settings.storage_base_path, settings.storage_base_url)

    @property
    def base_path(self) -> Path:
        return self._base

    def _resolve(self, path: str) -> Path:
        if not path:
            raise StorageError("storage path cannot be empty")
        full = (self._base / path).resolve()
        if not full.is_relative_to(self._base):
            raise StorageError(f"storage path {path} escapes the storage root")
        return full

    async def put(self, content: bytes, name: str, owner_uid: str) -> str:
        owner = sanitize_file_name(owner_uid)
        relative = f"{owner}/{unique_file_name(name, owner)}"
        target = self._resolve(relative)

        await asyncio.to_thread(_write, target, content)
        logger.info("stored %s for %s at %s", name, owner_uid, relative)
        return relative

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError as e:
            raise BlobNotFound(path) from e
        logger.info("deleted %s", path)

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.replace('\\', '/')}"


def _write(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(target, "wb") as fh:
            fh.write(content)
    except OSError:
        target.unlink(missing_ok=True)
        raise


__all__ = ("sanitize_file_name", "unique_file_name", "LocalBlobStore")
