"""Resolve a vector store backend name to a fresh store instance.

Backends are imported lazily so the optional ``faiss`` and ``supabase``
extras are only needed when selected.
"""

from __future__ import annotations

import importlib
import logging

from tutor_rag.exceptions import ConfigurationError
from tutor_rag.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)

# backend -> (module_path, class_name, install extra)
_BACKENDS: dict[str, tuple[str, str, str]] = {
    "faiss": ("tutor_rag.vectorstore.faiss_store", "FAISSStore", "faiss"),
    "supabase": ("tutor_rag.vectorstore.supabase_store", "SupabaseStore", "supabase"),
}


def get_vector_store(backend: str = "faiss", **kwargs) -> VectorStore:
    """Build the vector store registered under ``backend``.

    Every call returns a new instance; callers that need to share a store
    hold on to the one they built.

    Raises:
        ValueError: If ``backend`` is not registered.
        ConfigurationError: If the backend's optional dependencies are missing.
    """
    key = backend.lower()
    if key not in _BACKENDS:
        raise ValueError(f"Unknown vector store '{backend}'. Available: {available_stores()}")

    module_path, cls_name, extra = _BACKENDS[key]
    try:
        store_cls = getattr(importlib.import_module(module_path), cls_name)
        store = store_cls(**kwargs)
    except ImportError as exc:
        raise ConfigurationError(
            f"Vector store '{key}' needs the '{extra}' extra: "
            f"pip install tutor-knowledge-rag[{extra}] ({exc})"
        ) from exc

    logger.debug("Built %s for backend '%s'", cls_name, key)
    return store


def available_stores() -> list[str]:
    """Names of the registered vector store backends."""
    return list(_BACKENDS)
