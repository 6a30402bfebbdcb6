"""Build pipelines from ``Settings`` — shared by the CLI and HTTP handlers."""

from __future__ import annotations

import logging

import httpx

from tutor_rag.chunking.window_chunker import WindowChunker
from tutor_rag.config import Settings
from tutor_rag.documents.registry import DocumentRegistry, get_document_registry
from tutor_rag.embeddings.chain import EmbeddingChain
from tutor_rag.embeddings.factory import build_embedding_chain
from tutor_rag.pipeline.ingest import IngestPipeline
from tutor_rag.pipeline.query import QueryPipeline
from tutor_rag.vectorstore.base import VectorStore
from tutor_rag.vectorstore.factory import get_vector_store

logger = logging.getLogger(__name__)


def build_vector_store(settings: Settings) -> VectorStore:
    """Create the configured vector store backend."""
    cfg = settings.vectorstore
    if cfg.backend == "supabase":
        from tutor_rag.database import get_supabase_client

        client = get_supabase_client(cfg.supabase_url, cfg.supabase_key)
        return get_vector_store(
            "supabase",
            client=client,
            table=cfg.embeddings_table,
            search_function=cfg.search_function,
        )
    return get_vector_store(cfg.backend, dimension=settings.embedding.dimension, path=cfg.path)


def build_document_registry(settings: Settings) -> DocumentRegistry:
    """Create the document registry matching the vector store backend."""
    cfg = settings.vectorstore
    if cfg.backend == "supabase":
        from tutor_rag.database import get_supabase_client

        client = get_supabase_client(cfg.supabase_url, cfg.supabase_key)
        return get_document_registry("supabase", client=client, table=cfg.documents_table)
    return get_document_registry("memory")


def build_ingest_pipeline(
    settings: Settings,
    vector_store: VectorStore | None = None,
    document_registry: DocumentRegistry | None = None,
    embedding_chain: EmbeddingChain | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> IngestPipeline:
    """Wire an ``IngestPipeline`` from settings, with optional overrides."""
    return IngestPipeline(
        embedding_chain=(
            embedding_chain if embedding_chain is not None
            else build_embedding_chain(settings.embedding, transport)
        ),
        vector_store=vector_store if vector_store is not None else build_vector_store(settings),
        document_registry=(
            document_registry if document_registry is not None
            else build_document_registry(settings)
        ),
        chunker=WindowChunker(settings.chunking.chunk_size, settings.chunking.overlap),
        batch_size=settings.ingestion.batch_size,
        time_budget=settings.ingestion.time_budget_seconds,
        embed_timeout=settings.embedding.ingest_timeout,
        min_content_length=settings.ingestion.min_content_length,
        error_markers=settings.ingestion.error_markers,
    )


def build_query_pipeline(
    settings: Settings,
    vector_store: VectorStore | None = None,
    embedding_chain: EmbeddingChain | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> QueryPipeline:
    """Wire a ``QueryPipeline`` from settings, with optional overrides."""
    return QueryPipeline(
        embedding_chain=(
            embedding_chain if embedding_chain is not None
            else build_embedding_chain(settings.embedding, transport)
        ),
        vector_store=vector_store if vector_store is not None else build_vector_store(settings),
        embed_timeout=settings.embedding.query_timeout,
    )
