"""Ingestion pipeline — text → validate → register → chunk → embed → store.

Chunks are embedded in small concurrent batches under a wall-clock budget.
When the budget runs out, whatever has been embedded so far is persisted and
the report flags the document as partially indexed.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field

from tutor_rag.chunking.base import BaseChunker
from tutor_rag.chunking.schemas import Chunk, ChunkMetadata
from tutor_rag.chunking.window_chunker import WindowChunker
from tutor_rag.documents.registry import DocumentRegistry
from tutor_rag.documents.validation import (
    DEFAULT_ERROR_MARKERS,
    MIN_CONTENT_LENGTH,
    validate_content,
)
from tutor_rag.embeddings.chain import EmbeddingChain
from tutor_rag.embeddings.schemas import EmbeddingResult
from tutor_rag.exceptions import IngestionIncompleteError, InvalidContentError
from tutor_rag.pipeline.schemas import IngestionReport
from tutor_rag.vectorstore.base import VectorStore
from tutor_rag.vectorstore.schemas import VectorRecord

logger = logging.getLogger(__name__)

BATCH_SIZE = 5
TIME_BUDGET_SECONDS = 45.0
EMBED_TIMEOUT_SECONDS = 15.0


@dataclass
class IngestionContext:
    """Per-call bookkeeping for the batch loop."""

    document_id: str
    file_name: str | None
    uploader_id: str
    total_chunks: int
    started_at: float
    deadline: float
    records: list[VectorRecord] = field(default_factory=list)
    tier_counts: Counter[str] = field(default_factory=Counter)
    batches_completed: int = 0

    def expired(self, now: float) -> bool:
        return now >= self.deadline

    def record(self, chunk: Chunk, result: EmbeddingResult) -> None:
        self.tier_counts[result.tier.value] += 1
        self.records.append(VectorRecord(
            id=str(uuid.uuid4()),
            document_id=self.document_id,
            chunk_index=chunk.chunk_index,
            text=chunk.text,
            embedding=result.vector,
            metadata=ChunkMetadata(
                file_name=self.file_name,
                chunk_index=chunk.chunk_index,
                total_chunks=self.total_chunks,
                uploader_id=self.uploader_id,
                embedding_tier=result.tier.value,
            ),
        ))


class IngestPipeline:
    """Orchestrates document ingestion into the vector store."""

    def __init__(
        self,
        embedding_chain: EmbeddingChain,
        vector_store: VectorStore,
        document_registry: DocumentRegistry,
        chunker: BaseChunker | None = None,
        batch_size: int = BATCH_SIZE,
        time_budget: float = TIME_BUDGET_SECONDS,
        embed_timeout: float | None = EMBED_TIMEOUT_SECONDS,
        min_content_length: int = MIN_CONTENT_LENGTH,
        error_markers: tuple[str, ...] | list[str] = DEFAULT_ERROR_MARKERS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.embedding_chain = embedding_chain
        self.vector_store = vector_store
        self.document_registry = document_registry
        self.chunker = chunker or WindowChunker()
        self.batch_size = max(1, batch_size)
        self.time_budget = time_budget
        self.embed_timeout = embed_timeout
        self.min_content_length = min_content_length
        self.error_markers = tuple(error_markers)
        self._clock = clock

    async def ingest(
        self,
        content: str,
        file_name: str | None,
        uploader_id: str,
        document_id: str | None = None,
    ) -> IngestionReport:
        """Index ``content`` as the chunks of one document.

        Args:
            content: Already-extracted plain text.
            file_name: Display name of the source.
            uploader_id: Who uploaded the document.
            document_id: Existing document to attach chunks to; a new
                document record is created when omitted.

        Returns:
            An ``IngestionReport``. ``chunks_persisted < chunks_processed``
            means the time budget ran out and the document is partially
            indexed.

        Raises:
            InvalidContentError: Content is empty, too short, or an error
                sentinel, or no uploader was given.
            IngestionIncompleteError: No chunk could be embedded.
            StorageError: The registry or the final bulk write failed.
        """
        started_at = self._clock()

        validate_content(content, self.min_content_length, self.error_markers)
        if not uploader_id:
            raise InvalidContentError("An uploader id is required")

        if not document_id:
            document = await self.document_registry.create(file_name, uploader_id)
            document_id = document.id
            file_name = document.file_name

        chunks = self.chunker.chunk(content)
        ctx = IngestionContext(
            document_id=document_id,
            file_name=file_name,
            uploader_id=uploader_id,
            total_chunks=len(chunks),
            started_at=started_at,
            deadline=started_at + self.time_budget,
        )

        await self._embed_batches(chunks, ctx)

        if not ctx.records:
            raise IngestionIncompleteError(
                f"No chunks of document {document_id} could be embedded "
                f"within {self.time_budget:.0f}s",
                document_id=document_id,
                chunks_processed=len(chunks),
            )

        stored = await self.vector_store.add(ctx.records)

        warnings: list[str] = []
        if stored < len(chunks):
            warnings.append(
                f"Document partially indexed: {stored} of {len(chunks)} chunks stored"
            )
            logger.warning(
                "Document %s partially indexed (%d/%d)", document_id, stored, len(chunks)
            )

        elapsed = self._clock() - started_at
        logger.info(
            "Ingested %s: %d chunks → %d stored in %.1fs (tiers: %s)",
            file_name or document_id,
            len(chunks),
            stored,
            elapsed,
            dict(ctx.tier_counts),
        )

        return IngestionReport(
            document_id=document_id,
            chunks_processed=len(chunks),
            chunks_persisted=stored,
            tier_counts=dict(ctx.tier_counts),
            elapsed_seconds=elapsed,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    async def _embed_batches(self, chunks: list[Chunk], ctx: IngestionContext) -> None:
        for start in range(0, len(chunks), self.batch_size):
            if ctx.expired(self._clock()):
                logger.warning(
                    "Time budget of %.0fs exhausted after %d batches; "
                    "skipping %d remaining chunks",
                    self.time_budget,
                    ctx.batches_completed,
                    len(chunks) - start,
                )
                break

            batch = chunks[start : start + self.batch_size]
            # gather() returns results in batch order, not completion order
            results = await asyncio.gather(*(self._embed_chunk(c.text) for c in batch))
            for chunk, result in zip(batch, results, strict=True):
                ctx.record(chunk, result)

            ctx.batches_completed += 1
            logger.info(
                "Embedded batch %d (%d/%d chunks)",
                ctx.batches_completed,
                len(ctx.records),
                ctx.total_chunks,
            )

    async def _embed_chunk(self, text: str) -> EmbeddingResult:
        try:
            return await self.embedding_chain.embed(text, timeout=self.embed_timeout)
        except Exception:
            logger.exception("Embedding chain raised; using hash fallback for this chunk")
            return self.embedding_chain.fallback(text)
