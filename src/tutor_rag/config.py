"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class EmbeddingSettings(BaseModel):
    dimension: int = 768
    tiers: list[str] = Field(default_factory=lambda: ["semantic", "keyword", "hash"])
    gateway_url: str = "https://ai.gateway.lovable.dev/v1"
    model: str = "google/gemini-2.5-flash-lite"
    api_key: str | None = None
    temperature: float = 0.1
    max_input_chars: int = 3000
    max_keywords: int = 50
    ingest_timeout: float = 15.0
    query_timeout: float = 12.0


class ChunkingSettings(BaseModel):
    chunk_size: int = 1000
    overlap: int = 200


class IngestionSettings(BaseModel):
    batch_size: int = 5
    time_budget_seconds: float = 45.0
    min_content_length: int = 20
    error_markers: list[str] = Field(
        default_factory=lambda: [
            "[error",
            "error:",
            "[no se pudo extraer",
            "[el contenido de este archivo",
        ]
    )


class RetrievalSettings(BaseModel):
    match_count: int = 5
    match_threshold: float = 0.3


class VectorStoreSettings(BaseModel):
    backend: str = "faiss"
    path: str = "local_data/vectorstore"
    supabase_url: str | None = None
    supabase_key: str | None = None
    embeddings_table: str = "document_embeddings"
    documents_table: str = "uploaded_documents"
    search_function: str = "search_documents"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    vectorstore: VectorStoreSettings = Field(default_factory=VectorStoreSettings)


# (env var, section, field)
_ENV_OVERRIDES: list[tuple[str, str, str]] = [
    ("TUTOR_RAG_API_KEY", "embedding", "api_key"),
    ("SUPABASE_URL", "vectorstore", "supabase_url"),
    ("SUPABASE_SERVICE_ROLE_KEY", "vectorstore", "supabase_key"),
]


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("TUTOR_RAG_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for env_var, section, key in _ENV_OVERRIDES:
        value = os.getenv(env_var)
        if value:
            raw.setdefault(section, {})[key] = value
    return raw


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML file, falling back to defaults.

    Environment variables in ``_ENV_OVERRIDES`` win over the file so that
    secrets never have to be written to disk.
    """
    settings_path = Path(path) if path is not None else _find_settings_file()

    raw: dict[str, Any] = {}
    if settings_path is not None:
        with open(settings_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    return Settings(**_apply_env_overrides(raw))
