"""Upload — document bytes as handed over by the transport layer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Upload:
    """
    One file to stage. Exactly one of content and path is set.

    Example:
        Upload("cv.pdf", "application/pdf", content=data)
        Upload("scan.png", "image/png", path=Path("/tmp/upload-1234"))
    """

    file_name: str
    mime_type: str
    content: bytes | None = None
    path: Path | None = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.path is None):
            raise ValueError("Upload needs exactly one of content or path")

    @property
    def size(self) -> int:
        if self.path is None:
            return len(self.content or b"")
        return self.path.stat().st_size

    def read(self) -> bytes:
        if self.path is None:
            return self.content or b""
        with open(self.path, "rb") as fh:
            return fh.read()


__all__ = ("Upload",)
