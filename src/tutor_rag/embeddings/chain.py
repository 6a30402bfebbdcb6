"""Embedding chain — try each provider in order until one succeeds.

Remote outages never escape the chain: a ``ProviderFailure`` moves on to the
next tier, and if every configured provider fails the pure hash is used.
Only a local bug (a provider returning the wrong dimensionality) raises.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.hash_provider import PureHashProvider
from tutor_rag.embeddings.hashing import DEFAULT_DIM
from tutor_rag.embeddings.schemas import EmbeddingResult, ProviderFailure
from tutor_rag.exceptions import ConfigurationError, EmbeddingDimensionError

logger = logging.getLogger(__name__)


class EmbeddingChain:
    """Ordered chain of embedding providers sharing one dimensionality."""

    def __init__(
        self,
        providers: Sequence[EmbeddingProvider],
        dimension: int = DEFAULT_DIM,
    ):
        for provider in providers:
            if provider.dimension != dimension:
                raise ConfigurationError(
                    f"{provider.provider_name()} has dimension {provider.dimension}, "
                    f"chain expects {dimension}"
                )
        self.providers = list(providers)
        self._dimension = dimension
        self._fallback = PureHashProvider(dimension)

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str, timeout: float | None = None) -> EmbeddingResult:
        """Embed ``text`` with the best tier that succeeds.

        Raises:
            EmbeddingDimensionError: If a provider returns a vector of the
                wrong length.
        """
        for provider in self.providers:
            outcome = await provider.embed(text, timeout=timeout)

            if isinstance(outcome, ProviderFailure):
                logger.warning(
                    "%s failed (%s), trying next tier",
                    outcome.provider,
                    outcome.reason,
                )
                continue

            if len(outcome.vector) != self._dimension:
                raise EmbeddingDimensionError(
                    provider.provider_name(), self._dimension, len(outcome.vector)
                )
            return outcome

        if self.providers:
            logger.warning("All %d providers failed, using hash fallback", len(self.providers))
        return self.fallback(text)

    def fallback(self, text: str) -> EmbeddingResult:
        """Embed ``text`` with the pure hash tier (never fails)."""
        return self._fallback.embed_sync(text)

    def describe(self) -> list[str]:
        """Provider names in the order they are tried."""
        return [p.provider_name() for p in self.providers]
