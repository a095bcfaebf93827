"""Helpers for reading multipart uploads."""

from __future__ import annotations

import re
import secrets
import unicodedata
from pathlib import PureWindowsPath

from fastapi import HTTPException, UploadFile, status

from ..config import Settings

CHUNK_SIZE = 1024 * 1024  # 1MB


def _generated_name() -> str:
    return f"document-{secrets.token_hex(8)}.pdf"


def display_filename(filename: str) -> str:
    """Return the uploaded name without directories or control characters.

    Non-ASCII letters are kept so the catalog shows what the user picked.
    """

    if not filename:
        return _generated_name()
    name = PureWindowsPath(filename).name
    cleaned = "".join(ch for ch in name if unicodedata.category(ch) != "Cc").strip()
    return cleaned or _generated_name()


def secure_filename(filename: str) -> str:
    """Return an ASCII-only version of the filename for response headers."""

    if not filename:
        return _generated_name()
    name = PureWindowsPath(filename).name
    cleaned = re.sub(r"[^A-Za-z0-9._ -]", "_", name).strip()
    return cleaned or _generated_name()


async def read_upload(*, upload: UploadFile, settings: Settings) -> bytes:
    """Return the bytes of ``upload`` after checking its type and size."""

    if (
        upload.content_type
        and upload.content_type.lower() not in settings.allowed_mimetypes
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported file type"
        )

    chunks: list[bytes] = []
    total_bytes = 0
    try:
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            total_bytes += len(chunk)
            if total_bytes > settings.max_upload_size:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail="File exceeds maximum allowed size",
                )
            chunks.append(chunk)
    finally:
        await upload.close()
    return b"".join(chunks)


__all__ = ["display_filename", "read_upload", "secure_filename"]
