"""
Blob store for avatars, company logos and resumes.

Files are written under ``settings.UPLOAD_DIR`` and served from
``settings.UPLOAD_BASE_URL`` (mounted as static files in ``main.py``).
"""
from __future__ import annotations

import logging
import uuid
from pathlib import Path

from fastapi import UploadFile

from .config import settings
from .errors import ValidationError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx"}
DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class BlobStore:
    def __init__(self, root: str | Path | None = None, base_url: str | None = None):
        self.root = Path(root or settings.UPLOAD_DIR)
        self.base_url = (base_url or settings.UPLOAD_BASE_URL).rstrip("/")

    def upload(self, data: bytes, folder: str, filename: str) -> dict:
        """Store ``data`` and return ``{"url": ..., "id": ...}``; the id is the path under root."""
        blob_id = f"{folder.strip('/')}/{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        path = self.root / blob_id
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored blob %s (%d bytes)", blob_id, len(data))
        return {"url": f"{self.base_url}/{blob_id}", "id": blob_id}

    def delete(self, blob_id: str) -> bool:
        path = (self.root / blob_id).resolve()
        if self.root.resolve() not in path.parents:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True


_store = BlobStore()


def get_blob_store() -> BlobStore:
    return _store


def _check(file: UploadFile, data: bytes, kind: str) -> None:
    ext = Path(file.filename or "").suffix.lower()
    mime = file.content_type or ""
    if kind == "image":
        ok = mime.startswith("image/") and ext in IMAGE_EXTENSIONS
    else:
        ok = mime in DOCUMENT_MIME_TYPES and ext in DOCUMENT_EXTENSIONS
    if not ok:
        raise ValidationError(
            f"File type not supported: {ext or mime}",
            [{"field": "file", "message": f"Expected an {kind} file"}],
        )
    if len(data) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationError(
            f"File size too large. Maximum size is {limit_mb}MB",
            [{"field": "file", "message": "File too large"}],
        )


async def store_upload(store: BlobStore, file: UploadFile, folder: str, kind: str = "image") -> dict:
    """Validate an uploaded image or document and push it to the blob store."""
    data = await file.read()
    _check(file, data, kind)
    return store.upload(data, folder, file.filename or "upload")
