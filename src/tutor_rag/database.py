"""Database connections: Supabase client setup."""

from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client

from tutor_rag.exceptions import ConfigurationError


@lru_cache
def get_supabase_client(url: str | None, key: str | None) -> Client:
    """Get a Supabase client for ``url`` (one per url/key pair).

    The ingestion pipeline writes embeddings for every uploader, so ``key``
    is expected to be the service-role key, which bypasses row-level
    security.
    """
    if not url or not key:
        raise ConfigurationError(
            "Supabase backend needs SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY"
        )
    return create_client(url, key)
