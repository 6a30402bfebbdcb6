"""Embedding provider factory — registry, lazy import, chain assembly."""

from __future__ import annotations

import importlib
import logging

import httpx

from tutor_rag.config import EmbeddingSettings
from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.chain import EmbeddingChain
from tutor_rag.embeddings.gateway import GatewayClient

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Provider registry: (provider_key, module_path, class_name, needs_gateway)
# ---------------------------------------------------------------------------

_PROVIDER_REGISTRY: list[tuple[str, str, str, bool]] = [
    ("semantic", "tutor_rag.embeddings.semantic_provider", "SemanticProvider", True),
    ("keyword", "tutor_rag.embeddings.keyword_provider", "KeywordHashProvider", True),
    ("hash", "tutor_rag.embeddings.hash_provider", "PureHashProvider", False),
]


def get_embedding_provider(provider: str, **kwargs) -> EmbeddingProvider:
    """Get an embedding provider by name.

    Args:
        provider: One of ``semantic``, ``keyword``, ``hash``.
        **kwargs: Passed to the provider constructor.

    Returns:
        An ``EmbeddingProvider`` instance.
    """
    key = provider.lower()

    for reg_key, module_path, cls_name, _ in _PROVIDER_REGISTRY:
        if reg_key == key:
            mod = importlib.import_module(module_path)
            cls = getattr(mod, cls_name)
            return cls(**kwargs)

    available = [k for k, _, _, _ in _PROVIDER_REGISTRY]
    raise ValueError(f"Unknown embedding provider '{provider}'. Available: {available}")


def available_providers() -> list[str]:
    """Return names of registered embedding providers."""
    return [k for k, _, _, _ in _PROVIDER_REGISTRY]


def _needs_gateway(key: str) -> bool:
    return any(k == key and needs for k, _, _, needs in _PROVIDER_REGISTRY)


def build_embedding_chain(
    settings: EmbeddingSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> EmbeddingChain:
    """Assemble the tier chain described by ``settings.tiers``.

    Remote tiers are skipped when no gateway API key is configured, leaving
    a chain that degrades straight to the hash fallback.
    """
    cfg = settings or EmbeddingSettings()

    gateway: GatewayClient | None = None
    if cfg.api_key:
        gateway = GatewayClient(
            api_key=cfg.api_key,
            base_url=cfg.gateway_url,
            model=cfg.model,
            temperature=cfg.temperature,
            timeout=cfg.ingest_timeout,
            transport=transport,
        )

    providers: list[EmbeddingProvider] = []
    for tier in cfg.tiers:
        key = tier.lower()
        if key == "semantic":
            kwargs = {"max_input_chars": cfg.max_input_chars}
        elif key == "keyword":
            kwargs = {"max_input_chars": cfg.max_input_chars, "max_keywords": cfg.max_keywords}
        else:
            kwargs = {}

        if _needs_gateway(key):
            if gateway is None:
                logger.warning("No gateway API key configured, skipping '%s' tier", key)
                continue
            kwargs["gateway"] = gateway

        providers.append(get_embedding_provider(key, dimension=cfg.dimension, **kwargs))

    chain = EmbeddingChain(providers, dimension=cfg.dimension)
    logger.info("Embedding chain: %s", " -> ".join(chain.describe()) or "hash fallback only")
    return chain
