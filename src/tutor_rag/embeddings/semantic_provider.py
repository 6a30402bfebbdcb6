"""Semantic tier — ask the AI gateway for the embedding vector itself."""

from __future__ import annotations

import asyncio
import logging
import math

import numpy as np

from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.gateway import GatewayClient, extract_json_array
from tutor_rag.embeddings.hashing import DEFAULT_DIM, l2_normalize
from tutor_rag.embeddings.prompts import SEMANTIC_VECTOR_TEMPLATE, build_vector_prompt
from tutor_rag.embeddings.schemas import EmbeddingResult, EmbeddingTier, ProviderFailure
from tutor_rag.exceptions import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_CHARS = 3000


def _to_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_vector_response(
    content: str,
    dimension: int = DEFAULT_DIM,
) -> EmbeddingResult | ProviderFailure:
    """Validate a gateway reply into a unit-length semantic vector.

    The first ``dimension`` numeric entries are clipped to ``[-1, 1]`` and
    L2-normalized. Non-numeric entries are skipped; fewer than ``dimension``
    usable numbers, or an all-zero vector, is a failure.
    """
    provider = SemanticProvider.provider_name()
    try:
        values = extract_json_array(content)
    except ValueError as exc:
        return ProviderFailure(provider=provider, reason=f"malformed vector reply: {exc}")

    numbers = [n for n in (_to_float(v) for v in values) if n is not None]
    if len(numbers) < dimension:
        return ProviderFailure(
            provider=provider,
            reason=f"expected {dimension} numbers, got {len(numbers)}",
        )

    vector = np.clip(np.array(numbers[:dimension], dtype=np.float64), -1.0, 1.0)
    if not np.any(vector):
        return ProviderFailure(provider=provider, reason="vector has zero magnitude")

    return EmbeddingResult(vector=l2_normalize(vector).tolist(), tier=EmbeddingTier.SEMANTIC)


class SemanticProvider(EmbeddingProvider):
    """Embed text by asking the gateway model for ``dimension`` features."""

    tier = EmbeddingTier.SEMANTIC

    def __init__(
        self,
        gateway: GatewayClient,
        dimension: int = DEFAULT_DIM,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ):
        self.gateway = gateway
        self._dimension = dimension
        self.max_input_chars = max_input_chars
        self._system_prompt = build_vector_prompt(dimension)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(
        self,
        text: str,
        timeout: float | None = None,
    ) -> EmbeddingResult | ProviderFailure:
        user = SEMANTIC_VECTOR_TEMPLATE.format(text=text[: self.max_input_chars])
        try:
            content = await asyncio.wait_for(
                self.gateway.complete(self._system_prompt, user, timeout=timeout),
                timeout=timeout,
            )
        except TimeoutError:
            return self._failure(f"timed out after {timeout}s")
        except GatewayError as exc:
            return self._failure(str(exc))

        return parse_vector_response(content, self._dimension)

    @property
    def dimension(self) -> int:
        return self._dimension
