"""Hash fallback tier — pure, local, always succeeds."""

from __future__ import annotations

from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.hashing import DEFAULT_DIM, hash_embedding
from tutor_rag.embeddings.schemas import EmbeddingResult, EmbeddingTier


class PureHashProvider(EmbeddingProvider):
    """Embed text with the deterministic byte-scatter hash."""

    tier = EmbeddingTier.HASH_FALLBACK

    def __init__(self, dimension: int = DEFAULT_DIM):
        self._dimension = dimension

    async def embed(self, text: str, timeout: float | None = None) -> EmbeddingResult:
        return self.embed_sync(text)

    def embed_sync(self, text: str) -> EmbeddingResult:
        return EmbeddingResult(
            vector=hash_embedding(text, self._dimension),
            tier=EmbeddingTier.HASH_FALLBACK,
        )

    @property
    def dimension(self) -> int:
        return self._dimension
