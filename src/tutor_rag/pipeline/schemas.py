"""Data models for the ingestion and query pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SearchType(StrEnum):
    """Which search produced a retrieval result."""

    SEMANTIC = "semantic_ai"
    TEXT_FALLBACK = "text_fallback"


@dataclass
class IngestionReport:
    """Result of ingesting one document."""

    document_id: str
    chunks_processed: int
    chunks_persisted: int
    tier_counts: dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0
    warnings: list[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when some, but not all, chunks were indexed."""
        return 0 < self.chunks_persisted < self.chunks_processed


@dataclass(frozen=True)
class QueryMatch:
    """A chunk returned for a query."""

    chunk_id: str
    document_id: str
    chunk_index: int
    score: float
    content: str


@dataclass
class RetrievalResult:
    """Output of the query pipeline."""

    query: str
    matches: list[QueryMatch] = field(default_factory=list)
    context: str = ""
    search_type: SearchType = SearchType.SEMANTIC
    embedding_tier: str | None = None
