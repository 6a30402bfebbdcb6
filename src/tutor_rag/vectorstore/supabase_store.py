"""Supabase (Postgres + pgvector) vector store.

Chunks live in the ``document_embeddings`` table. Similarity search goes
through the ``search_documents`` RPC; lexical search uses Postgres full-text
search on ``content_chunk``. The Supabase client is synchronous, so every
call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from tutor_rag.chunking.schemas import ChunkMetadata
from tutor_rag.exceptions import StorageError
from tutor_rag.vectorstore.base import VectorStore
from tutor_rag.vectorstore.schemas import SearchResult, VectorRecord, query_terms

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "id, document_id, chunk_index, content_chunk, metadata"


def to_pgvector_literal(vector: list[float]) -> str:
    """Serialize a vector the way pgvector parses it: ``[v1,v2,...]``."""
    return "[" + ",".join(repr(float(v)) for v in vector) + "]"


def _row_to_result(row: dict[str, Any], score: float) -> SearchResult:
    metadata = ChunkMetadata.from_dict(row.get("metadata"))
    chunk_index = row.get("chunk_index")
    return SearchResult(
        id=str(row.get("id", "")),
        document_id=str(row.get("document_id", "")),
        chunk_index=int(chunk_index if chunk_index is not None else metadata.chunk_index),
        text=row.get("content_chunk") or "",
        score=score,
        metadata=metadata,
    )


def _map_rows(
    operation: str, rows: list[dict[str, Any]] | None, score_key: str | None = None
) -> list[SearchResult]:
    """Convert response rows, raising ``StorageError`` on rows of the wrong shape."""
    try:
        return [
            _row_to_result(row, float(row.get(score_key, 0.0)) if score_key else 0.0)
            for row in rows or []
        ]
    except (TypeError, ValueError, KeyError, AttributeError) as exc:
        logger.error("SupabaseStore %s returned a malformed row: %s", operation, exc)
        raise StorageError(f"Supabase {operation} returned a malformed row: {exc}") from exc


class SupabaseStore(VectorStore):
    """pgvector-backed store reached through the Supabase REST API."""

    def __init__(
        self,
        client: Client,
        table: str = "document_embeddings",
        search_function: str = "search_documents",
    ):
        self._client = client
        self.table = table
        self.search_function = search_function

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def add(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        rows = [
            {
                "document_id": r.document_id,
                "chunk_index": r.chunk_index,
                "content_chunk": r.text,
                "embedding": to_pgvector_literal(r.embedding),
                "metadata": r.metadata.to_dict(),
            }
            for r in records
        ]
        response = await self._execute(
            "insert", lambda: self._client.table(self.table).insert(rows).execute()
        )

        stored = len(response.data) if response.data else len(rows)
        logger.info("SupabaseStore inserted %d records into %s", stored, self.table)
        return stored

    async def similarity_search(
        self,
        query_embedding: list[float],
        threshold: float = 0.0,
        limit: int = 5,
    ) -> list[SearchResult]:
        params = {
            "query_embedding": to_pgvector_literal(query_embedding),
            "match_threshold": threshold,
            "match_count": limit,
        }
        response = await self._execute(
            "similarity search",
            lambda: self._client.rpc(self.search_function, params).execute(),
        )

        return _map_rows("similarity search", response.data, "similarity")

    async def text_search(self, query: str, limit: int = 5) -> list[SearchResult]:
        terms = query_terms(query)
        if not terms:
            return []

        response = await self._execute(
            "text search",
            lambda: self._client.table(self.table)
            .select(_SELECT_COLUMNS)
            .text_search("content_chunk", " | ".join(terms))
            .limit(limit)
            .execute(),
        )
        return _map_rows("text search", response.data)

    async def count(self) -> int:
        response = await self._execute(
            "count",
            lambda: self._client.table(self.table)
            .select("id", count="exact")
            .limit(1)
            .execute(),
        )
        return response.count or 0

    async def delete_document(self, document_id: str) -> int:
        response = await self._execute(
            "delete",
            lambda: self._client.table(self.table)
            .delete()
            .eq("document_id", document_id)
            .execute(),
        )
        return len(response.data or [])

    async def clear(self) -> None:
        await self._execute(
            "clear",
            lambda: self._client.table(self.table).delete().not_.is_("id", "null").execute(),
        )

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    async def _execute(self, operation: str, call: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(call)
        except (APIError, httpx.HTTPError) as exc:
            logger.error("SupabaseStore %s failed: %s", operation, exc)
            raise StorageError(f"Supabase {operation} failed: {exc}") from exc
