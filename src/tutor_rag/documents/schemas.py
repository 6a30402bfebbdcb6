"""Data models for uploaded documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import PurePath


class UploadMode(StrEnum):
    """How the document reached the system."""

    TEXT = "text"  # pasted or already-extracted plain text
    FILE = "file"  # extracted from an uploaded binary file


# Extensions that imply a binary upload whose text was extracted upstream
_BINARY_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
}

TEXT_CONTENT_TYPE = "text/plain"


def infer_upload_mode(file_name: str | None) -> tuple[UploadMode, str]:
    """Return ``(upload_mode, content_type)`` implied by a file name."""
    suffix = PurePath(file_name or "").suffix.lower()
    if suffix in _BINARY_TYPES:
        return UploadMode.FILE, _BINARY_TYPES[suffix]
    return UploadMode.TEXT, TEXT_CONTENT_TYPE


@dataclass(frozen=True)
class Document:
    """A registered source document. Never mutated after creation."""

    id: str
    file_name: str
    uploaded_by: str
    file_type: str = TEXT_CONTENT_TYPE
    upload_mode: UploadMode = UploadMode.TEXT
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
