"""Keyword-hash tier — hash the text together with gateway-extracted keywords.

Asking for a short keyword list is cheaper and far more tolerant than asking
for a full vector, so this tier usually survives when the semantic tier
returns garbage.
"""

from __future__ import annotations

import asyncio
import logging

from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.gateway import GatewayClient, extract_json_array
from tutor_rag.embeddings.hashing import DEFAULT_DIM, keyword_hash_embedding
from tutor_rag.embeddings.prompts import build_keyword_prompt
from tutor_rag.embeddings.schemas import EmbeddingResult, EmbeddingTier, ProviderFailure
from tutor_rag.exceptions import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEYWORDS = 50
DEFAULT_MAX_INPUT_CHARS = 3000


def parse_keyword_response(
    content: str,
    max_keywords: int = DEFAULT_MAX_KEYWORDS,
) -> list[str] | ProviderFailure:
    """Validate a gateway reply into a ranked keyword list.

    Non-string and blank entries are dropped; an empty result is a failure.
    """
    provider = KeywordHashProvider.provider_name()
    try:
        values = extract_json_array(content)
    except ValueError as exc:
        return ProviderFailure(provider=provider, reason=f"malformed keyword reply: {exc}")

    keywords = [v.strip() for v in values if isinstance(v, str) and v.strip()]
    if not keywords:
        return ProviderFailure(provider=provider, reason="no keywords returned")
    return keywords[:max_keywords]


class KeywordHashProvider(EmbeddingProvider):
    """Embed text with the keyword-weighted hash."""

    tier = EmbeddingTier.KEYWORD_HASH

    def __init__(
        self,
        gateway: GatewayClient,
        dimension: int = DEFAULT_DIM,
        max_keywords: int = DEFAULT_MAX_KEYWORDS,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ):
        self.gateway = gateway
        self._dimension = dimension
        self.max_keywords = max_keywords
        self.max_input_chars = max_input_chars
        self._system_prompt = build_keyword_prompt(max_keywords)

    async def embed(
        self,
        text: str,
        timeout: float | None = None,
    ) -> EmbeddingResult | ProviderFailure:
        try:
            content = await asyncio.wait_for(
                self.gateway.complete(
                    self._system_prompt, text[: self.max_input_chars], timeout=timeout
                ),
                timeout=timeout,
            )
        except TimeoutError:
            return self._failure(f"timed out after {timeout}s")
        except GatewayError as exc:
            return self._failure(str(exc))

        keywords = parse_keyword_response(content, self.max_keywords)
        if isinstance(keywords, ProviderFailure):
            return keywords

        logger.debug("Extracted %d keywords", len(keywords))
        return EmbeddingResult(
            vector=keyword_hash_embedding(text, keywords, self._dimension),
            tier=EmbeddingTier.KEYWORD_HASH,
        )

    @property
    def dimension(self) -> int:
        return self._dimension
