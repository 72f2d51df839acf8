"""
Upload validation and storage for employee photos and identity documents.

Files are written below ``UPLOAD_DIR`` and referenced by their relative path,
served back through the ``/uploads`` static mount.
"""

from __future__ import annotations

import io
import logging
import uuid
from pathlib import Path

from PIL import Image

from hrms.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_DOCUMENT_TYPES = {
    **ALLOWED_IMAGE_TYPES,
    "application/pdf": ".pdf",
}


class UploadError(Exception):
    """Raised when an uploaded file fails validation."""


def _too_large(size: int, limit: int, label: str) -> str:
    return (
        f"{label} too large: {size / (1024 * 1024):.1f}MB. "
        f"Maximum: {limit / (1024 * 1024):.0f}MB"
    )


def validate_image(content: bytes, content_type: str | None, max_size: int | None = None) -> str:
    """Check type, size and decodability of an image.  Returns the file extension."""
    max_size = settings.MAX_PHOTO_SIZE if max_size is None else max_size
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise UploadError(
            f"Invalid image type: {content_type}. "
            f"Allowed: {', '.join(ALLOWED_IMAGE_TYPES)}"
        )
    if len(content) > max_size:
        raise UploadError(_too_large(len(content), max_size, "Image"))
    try:
        Image.open(io.BytesIO(content)).verify()
    except Exception as exc:
        raise UploadError("Invalid or corrupted image file") from exc
    return ALLOWED_IMAGE_TYPES[content_type]


def validate_document(content: bytes, content_type: str | None) -> str:
    """Accept images or PDF up to ``MAX_DOCUMENT_SIZE``.  Returns the file extension."""
    if content_type not in ALLOWED_DOCUMENT_TYPES:
        raise UploadError(
            f"Invalid document type: {content_type}. Allowed: images or PDF"
        )
    if len(content) > settings.MAX_DOCUMENT_SIZE:
        raise UploadError(_too_large(len(content), settings.MAX_DOCUMENT_SIZE, "Document"))
    if content_type == "application/pdf":
        if not content.startswith(b"%PDF"):
            raise UploadError("Invalid PDF file")
        return ".pdf"
    return validate_image(content, content_type, settings.MAX_DOCUMENT_SIZE)


def store_file(content: bytes, folder: str, prefix: str, extension: str) -> str:
    """Write *content* below ``UPLOAD_DIR/folder`` and return its relative path."""
    root = Path(settings.UPLOAD_DIR)
    target_dir = root / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    name = f"{prefix}-{uuid.uuid4().hex}{extension}"
    (target_dir / name).write_bytes(content)
    relative = f"{folder}/{name}"
    logger.info("Stored upload %s (%d bytes)", relative, len(content))
    return relative


def delete_file(relative_path: str | None) -> None:
    """Remove a previously stored file; missing files are ignored."""
    if not relative_path:
        return
    path = Path(settings.UPLOAD_DIR) / relative_path
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("Upload %s already removed", relative_path)
