"""
Ingest — documents staged to blob storage and persisted with their order.

    from printly.ingest import DocumentIngestion, Upload

    ingestion = DocumentIngestion(blobs)
    uploads = [Upload("a.pdf", "application/pdf", content=b"...")]
    result = await ingestion.ingest(order, uploads, persist)
"""

from printly.ingest._upload import Upload
from printly.ingest._ingest import Persist, attach_paths, DocumentIngestion

__all__ = ("Upload", "Persist", "attach_paths", "DocumentIngestion")
