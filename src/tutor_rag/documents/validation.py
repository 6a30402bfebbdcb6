"""Input checks run before any chunking or embedding work."""

from __future__ import annotations

import re
from collections.abc import Sequence

from tutor_rag.exceptions import InvalidContentError, InvalidQueryError

MIN_CONTENT_LENGTH = 20

# Sentinels emitted by upstream text extraction instead of real content
DEFAULT_ERROR_MARKERS: tuple[str, ...] = (
    "[error",
    "error:",
    "[no se pudo extraer",
    "[el contenido de este archivo",
)

# Extractors prefix their output, sentinels included, with a "Documento: <name>" line
_DOCUMENT_HEADER = re.compile(r"^documento:[^\n]*\n+", re.IGNORECASE)


def is_error_sentinel(content: str, markers: Sequence[str] = DEFAULT_ERROR_MARKERS) -> bool:
    """True if ``content`` starts with a known extraction-error marker.

    A leading ``Documento: <name>`` header line is skipped before matching.
    """
    head = _DOCUMENT_HEADER.sub("", content.lstrip(), count=1).lstrip().lower()
    return any(head.startswith(marker.lower()) for marker in markers)


def validate_content(
    content: str | None,
    min_length: int = MIN_CONTENT_LENGTH,
    markers: Sequence[str] = DEFAULT_ERROR_MARKERS,
) -> str:
    """Reject content that is empty, too short, or an error sentinel.

    Raises:
        InvalidContentError: If the content must not be indexed.
    """
    if not content or not content.strip():
        raise InvalidContentError("Content is empty")
    if len(content) < min_length:
        raise InvalidContentError(
            f"Content is too short to index ({len(content)} chars, minimum {min_length})"
        )
    if is_error_sentinel(content, markers):
        raise InvalidContentError("Content is an extraction error message, not document text")
    return content


def validate_query(query: str | None, match_count: int) -> str:
    """Reject blank queries and non-positive result limits.

    Raises:
        InvalidQueryError: If the request cannot be served.
    """
    if not query or not query.strip():
        raise InvalidQueryError("Query is required")
    if match_count < 1:
        raise InvalidQueryError(f"match_count must be at least 1, got {match_count}")
    return query.strip()
