"""Embedding strategy chain — semantic, keyword-hash, hash fallback."""

from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.chain import EmbeddingChain
from tutor_rag.embeddings.factory import (
    available_providers,
    build_embedding_chain,
    get_embedding_provider,
)
from tutor_rag.embeddings.schemas import EmbeddingResult, EmbeddingTier, ProviderFailure

__all__ = [
    "EmbeddingChain",
    "EmbeddingProvider",
    "EmbeddingResult",
    "EmbeddingTier",
    "ProviderFailure",
    "available_providers",
    "build_embedding_chain",
    "get_embedding_provider",
]
