"""
carehub/storage/uploads.py — Complaint attachment storage.

Accepts JPEG/PNG images and PDFs up to ``settings.max_upload_bytes``, writes
them under ``settings.upload_dir`` with a collision-free name, and returns
the public path they are served from (``/uploads/<name>``).
"""
from __future__ import annotations

import logging
import re
import secrets
import time
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from carehub.config import get_settings
from carehub.errors import ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|pdf")


def validate_attachment(filename: str, content_type: str | None, size: int, max_bytes: int) -> str:
    """
    Check name, MIME type and size of an upload. Returns the lowercased extension.

    Raises:
        ValidationError: if the file is not an image/PDF or is too large.
    """
    extension = Path(filename or "").suffix.lower()
    if not (ALLOWED_TYPES.search(extension) and ALLOWED_TYPES.search(content_type or "")):
        raise ValidationError("Only images and PDFs are allowed")
    if size > max_bytes:
        raise ValidationError(
            "File upload error",
            details=[{"field": "attachment", "message": f"File exceeds {max_bytes} bytes"}],
        )
    return extension


def unique_filename(extension: str) -> str:
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"


async def save_attachment(upload: UploadFile, upload_dir: str | None = None) -> str:
    settings = get_settings()
    directory = Path(upload_dir or settings.upload_dir)

    data = await upload.read(settings.max_upload_bytes + 1)
    extension = validate_attachment(
        upload.filename or "", upload.content_type, len(data), settings.max_upload_bytes
    )

    name = unique_filename(extension)
    directory.mkdir(parents=True, exist_ok=True)
    await run_in_threadpool((directory / name).write_bytes, data)
    logger.info("Stored attachment %s (%d bytes)", name, len(data))
    return f"{PUBLIC_PREFIX}/{name}"


def discard_attachment(public_path: str, upload_dir: str | None = None) -> None:
    """Remove a stored attachment by its public path; a missing file is ignored."""
    directory = Path(upload_dir or get_settings().upload_dir)
    name = public_path.rsplit("/", 1)[-1]
    (directory / name).unlink(missing_ok=True)
    logger.info("Discarded attachment %s", name)
