"""
Attachment upload rules.

Size, MIME type and filename validation for uploads plus the storage key
layout `<tenant>/<YYYY-MM-DD>/<uuid>.<ext>`.

Dependencies: None (pure domain layer)
System role: Attachment validation
"""

import uuid
from datetime import date

MAX_FILE_SIZE = 10 * 1024 * 1024
TEMPORARY_EXPIRY_HOURS = 24
DEFAULT_EXTENSION = "bin"

ALLOWED_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "text/plain",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)


def validate_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
    max_size: int = MAX_FILE_SIZE,
) -> None:
    """
    Check an upload before it is stored.

    Args:
        filename: Client supplied filename
        content_type: Declared MIME type
        size: Payload size in bytes
        max_size: Upper bound in bytes

    Raises:
        ValueError: With a user-facing message on the first failed rule
    """
    if not filename or not filename.strip():
        raise ValueError("File name is required")
    if ".." in filename:
        raise ValueError("File name must not contain '..'")
    if size <= 0:
        raise ValueError("File is empty")
    if size > max_size:
        raise ValueError(
            f"File size exceeds maximum allowed size of {max_size // (1024 * 1024)}MB"
        )
    if content_type not in ALLOWED_MIME_TYPES:
        raise ValueError(f"File type '{content_type}' is not allowed")


def file_extension(filename: str) -> str:
    if "." not in filename:
        return DEFAULT_EXTENSION
    ext = filename.rsplit(".", 1)[1].strip().lower()
    return ext or DEFAULT_EXTENSION


def build_storage_path(tenant_id: uuid.UUID, filename: str, on: date, file_id: uuid.UUID | None = None) -> str:
    """Storage key for a new upload."""
    file_id = file_id or uuid.uuid4()
    return f"{tenant_id}/{on.isoformat()}/{file_id}.{file_extension(filename)}"
