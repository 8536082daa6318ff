"""Order creation input."""

from __future__ import annotations

from dataclasses import dataclass, field

from printly.domain import PrintOptions
from printly.ingest import Upload


@dataclass(frozen=True, slots=True)
class DocumentRequest:
    upload: Upload
    print_options: PrintOptions = field(default_factory=PrintOptions)

    @property
    def file_name(self) -> str:
        return self.upload.file_name

    @property
    def mime_type(self) -> str:
        return self.upload.mime_type


__all__ = ("DocumentRequest",)
