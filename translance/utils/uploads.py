"""Local-disk storage for uploaded project documents and profile pictures."""
from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Iterable
from pathlib import Path

from fastapi import UploadFile

from translance.config import get_settings
from translance.utils.errors import validation_error

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = {".txt", ".doc", ".docx", ".pdf", ".rtf", ".odt"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

_CHUNK_SIZE = 64 * 1024


def _unique_name(original: str) -> str:
    suffix = Path(original).suffix.lower()
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


def save_upload(
    upload: UploadFile,
    *,
    subdir: str,
    allowed_extensions: set[str],
    max_bytes: int,
) -> str:
    """Write ``upload`` under ``UPLOAD_DIR/subdir`` and return the stored path.

    The extension is checked against ``allowed_extensions`` before anything is
    written; a file exceeding ``max_bytes`` is removed again and rejected.
    """

    filename = upload.filename or ""
    extension = Path(filename).suffix.lower()
    if extension not in allowed_extensions:
        raise validation_error(
            "UNSUPPORTED_FILE_TYPE",
            f"File type not allowed: {filename or '<unnamed>'}",
        )

    target_dir = Path(get_settings().UPLOAD_DIR) / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / _unique_name(filename)

    written = 0
    with target.open("wb") as out:
        while chunk := upload.file.read(_CHUNK_SIZE):
            written += len(chunk)
            if written > max_bytes:
                break
            out.write(chunk)

    if written > max_bytes:
        target.unlink(missing_ok=True)
        raise validation_error("FILE_TOO_LARGE", f"File exceeds {max_bytes} bytes: {filename}")

    logger.info("Upload stored", extra={"path": str(target), "size": written})
    return target.as_posix()


def remove_files(paths: Iterable[str]) -> None:
    """Delete stored files, ignoring ones that are already gone."""

    for path in paths:
        Path(path).unlink(missing_ok=True)


__all__ = ["DOCUMENT_EXTENSIONS", "IMAGE_EXTENSIONS", "save_upload", "remove_files"]
