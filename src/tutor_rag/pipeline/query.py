"""Query pipeline — question → embed → similarity search → context.

If the store's similarity search is broken (as opposed to returning no rows
above the threshold) the pipeline falls back to a lexical search over chunk
text. Query-time failures never reach the caller: the worst case is an empty
``text_fallback`` result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tutor_rag.documents.validation import validate_query
from tutor_rag.embeddings.chain import EmbeddingChain
from tutor_rag.embeddings.schemas import EmbeddingResult
from tutor_rag.exceptions import StorageError
from tutor_rag.pipeline.schemas import QueryMatch, RetrievalResult, SearchType
from tutor_rag.vectorstore.base import VectorStore
from tutor_rag.vectorstore.schemas import SearchResult

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"
MATCH_COUNT = 5
MATCH_THRESHOLD = 0.3
QUERY_TIMEOUT_SECONDS = 12.0


def format_context(texts: Sequence[str]) -> str:
    """Join chunk texts into one context block, in the given order."""
    return CONTEXT_SEPARATOR.join(texts)


def _to_matches(results: Sequence[SearchResult]) -> list[QueryMatch]:
    return [
        QueryMatch(
            chunk_id=r.id,
            document_id=r.document_id,
            chunk_index=r.chunk_index,
            score=r.score,
            content=r.text,
        )
        for r in results
    ]


class QueryPipeline:
    """Orchestrates query embedding and chunk retrieval."""

    def __init__(
        self,
        embedding_chain: EmbeddingChain,
        vector_store: VectorStore,
        embed_timeout: float | None = QUERY_TIMEOUT_SECONDS,
    ):
        self.embedding_chain = embedding_chain
        self.vector_store = vector_store
        self.embed_timeout = embed_timeout

    async def retrieve(
        self,
        query: str,
        match_count: int = MATCH_COUNT,
        match_threshold: float = MATCH_THRESHOLD,
    ) -> RetrievalResult:
        """Find the chunks most similar to ``query``.

        Args:
            query: The search query.
            match_count: Maximum number of chunks to return.
            match_threshold: Minimum similarity for the semantic path.

        Returns:
            A ``RetrievalResult``; an empty ``matches`` list is a valid result.

        Raises:
            InvalidQueryError: If the query is blank or ``match_count < 1``.
        """
        query = validate_query(query, match_count)
        embedding = await self._embed_query(query)

        try:
            results = await self.vector_store.similarity_search(
                query_embedding=embedding.vector,
                threshold=match_threshold,
                limit=match_count,
            )
            search_type = SearchType.SEMANTIC
        except StorageError as exc:
            logger.warning("Similarity search failed (%s), falling back to text search", exc)
            results = await self._text_fallback(query, match_count)
            search_type = SearchType.TEXT_FALLBACK

        matches = _to_matches(results)
        logger.info(
            "Retrieved %d chunks (search=%s, tier=%s)",
            len(matches),
            search_type.value,
            embedding.tier.value,
        )

        return RetrievalResult(
            query=query,
            matches=matches,
            context=format_context([m.content for m in matches]),
            search_type=search_type,
            embedding_tier=embedding.tier.value,
        )

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    async def _embed_query(self, query: str) -> EmbeddingResult:
        try:
            return await self.embedding_chain.embed(query, timeout=self.embed_timeout)
        except Exception:
            logger.exception("Embedding chain raised; using hash fallback for the query")
            return self.embedding_chain.fallback(query)

    async def _text_fallback(self, query: str, match_count: int) -> list[SearchResult]:
        try:
            return await self.vector_store.text_search(query, limit=match_count)
        except StorageError:
            logger.exception("Text search fallback failed; returning no matches")
            return []
