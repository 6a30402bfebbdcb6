"""Data models for embedding results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EmbeddingTier(StrEnum):
    """Embedding strategies, ordered by quality."""

    SEMANTIC = "semantic"
    KEYWORD_HASH = "keyword-hash"
    HASH_FALLBACK = "hash-fallback"


@dataclass(frozen=True)
class EmbeddingResult:
    """A fixed-length vector and the tier that produced it."""

    vector: list[float]
    tier: EmbeddingTier


@dataclass(frozen=True)
class ProviderFailure:
    """Why a provider could not produce an embedding."""

    provider: str
    reason: str
