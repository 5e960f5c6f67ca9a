"""File validation utilities for uploads.

Enforces the extension allow-list and the upload size limit.
Every check here runs before anything touches the disk.
"""

from pathlib import PurePath
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from fastapi import UploadFile

from jobtrail.core.errors import UnsupportedFileTypeError, ValidationError

logger = structlog.get_logger()

# Maximum file size (10 MB); the configured limit is passed in by callers
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

# Chunk size for reading files (64 KB)
CHUNK_SIZE_BYTES = 64 * 1024

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".pdf", ".doc", ".docx"})

# Roles map to the human wording used in error messages
_ROLE_LABELS: dict[str, str] = {
    "resume": "resume",
    "cover-letter": "cover letter",
    "document": "document",
}


async def read_file_with_size_limit(
    file: "UploadFile",
    max_size: int = MAX_FILE_SIZE_BYTES,
) -> bytes:
    """Read file content with size limit to prevent DoS.

    Args:
        file: UploadFile from FastAPI.
        max_size: Maximum allowed file size in bytes.

    Returns:
        File content as bytes.

    Raises:
        ValidationError: If file exceeds size limit.
    """
    content = b""
    total_size = 0

    while True:
        chunk = await file.read(CHUNK_SIZE_BYTES)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise ValidationError(
                message=f"File too large. Maximum size: {max_size // (1024 * 1024)}MB",
                details=[{"field": "file", "error": "FILE_TOO_LARGE"}],
            )
        content += chunk

    return content


def file_extension(filename: str | None) -> str:
    """Lower-cased extension of ``filename`` including the dot, or ""."""
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def validate_file_extension(filename: str | None, role: str = "document") -> str:
    """Check ``filename`` against the allow-list.

    Args:
        filename: Client-supplied filename.
        role: Upload role ("resume", "cover-letter", "document"), used only
            for the error message.

    Returns:
        The normalized extension (e.g. ".pdf").

    Raises:
        UnsupportedFileTypeError: If the extension is missing or not allowed.
    """
    extension = file_extension(filename)
    if extension not in ALLOWED_EXTENSIONS:
        logger.warning(
            "Rejected upload with unsupported extension",
            extension=extension or None,
            role=role,
        )
        label = _ROLE_LABELS.get(role, "document")
        raise UnsupportedFileTypeError(
            f"Unsupported {label} file type. Please upload a PDF or Word document.",
            extension=extension or None,
        )
    return extension

