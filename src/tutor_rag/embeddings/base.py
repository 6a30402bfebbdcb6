"""Abstract base class for embedding providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tutor_rag.embeddings.schemas import EmbeddingResult, EmbeddingTier, ProviderFailure


class EmbeddingProvider(ABC):
    """One tier of the embedding chain.

    Providers must not raise for remote outages, timeouts or unparseable
    responses. They return a ``ProviderFailure`` and let the chain move on.
    """

    tier: EmbeddingTier

    @abstractmethod
    async def embed(
        self,
        text: str,
        timeout: float | None = None,
    ) -> EmbeddingResult | ProviderFailure:
        """Embed a single text.

        Args:
            text: The text to embed.
            timeout: Hard limit in seconds for any remote call.

        Returns:
            An ``EmbeddingResult`` on success, a ``ProviderFailure`` otherwise.
        """

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimensionality."""

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__

    def _failure(self, reason: str) -> ProviderFailure:
        return ProviderFailure(provider=self.provider_name(), reason=reason)
