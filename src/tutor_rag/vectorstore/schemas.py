"""Data models for vector store operations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from tutor_rag.chunking.schemas import ChunkMetadata

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


@dataclass
class VectorRecord:
    """A document chunk with its embedding, ready for storage."""

    id: str
    document_id: str
    chunk_index: int
    text: str
    embedding: list[float]
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)


@dataclass(frozen=True)
class SearchResult:
    """A single search result from the vector store."""

    id: str
    document_id: str
    chunk_index: int
    text: str
    score: float
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)


def query_terms(query: str) -> list[str]:
    """Whitespace-delimited query tokens, lowercased, without punctuation.

    Duplicates are dropped while keeping first-seen order.
    """
    terms: list[str] = []
    for raw in query.split():
        for token in _TOKEN_RE.findall(raw.lower()):
            if token not in terms:
                terms.append(token)
    return terms


def text_terms(text: str) -> set[str]:
    """Lowercased word tokens of a chunk, for lexical matching."""
    return set(_TOKEN_RE.findall(text.lower()))
