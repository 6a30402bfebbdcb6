"""Exception hierarchy for the ingestion and retrieval pipeline."""

from __future__ import annotations


class RAGError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(RAGError):
    """Invalid settings, e.g. a chunk overlap that is not smaller than the chunk size."""


class InvalidContentError(RAGError):
    """Content handed to ingestion is empty, too short, or an error sentinel."""


class InvalidQueryError(RAGError):
    """A retrieval request is missing its query or has nonsensical limits."""


class IngestionIncompleteError(RAGError):
    """No chunk could be embedded and persisted for a document.

    The document record, if one was created, is left in place so the caller
    can retry against the same ``document_id``.
    """

    def __init__(self, message: str, document_id: str | None = None, chunks_processed: int = 0):
        super().__init__(message)
        self.document_id = document_id
        self.chunks_processed = chunks_processed


class EmbeddingError(RAGError):
    """A local embedding bug (never raised for remote provider outages)."""


class EmbeddingDimensionError(EmbeddingError):
    """A provider produced a vector of the wrong length."""

    def __init__(self, provider: str, expected: int, actual: int):
        super().__init__(
            f"{provider} returned a {actual}-dimensional vector, expected {expected}"
        )
        self.provider = provider
        self.expected = expected
        self.actual = actual


class GatewayError(RAGError):
    """The remote AI gateway could not be reached or answered badly."""


class StorageError(RAGError):
    """The vector store or document registry failed."""
