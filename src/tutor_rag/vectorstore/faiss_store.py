"""FAISS vector store — local, zero infrastructure.

Uses an inner-product index over L2-normalized vectors (cosine similarity)
with a parallel record dict for chunk text and metadata. Lexical search is a
token-overlap scan over the stored chunk text.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np

from tutor_rag.chunking.schemas import ChunkMetadata
from tutor_rag.exceptions import StorageError
from tutor_rag.vectorstore.base import VectorStore
from tutor_rag.vectorstore.schemas import SearchResult, VectorRecord, query_terms, text_terms

logger = logging.getLogger(__name__)


class FAISSStore(VectorStore):
    """FAISS-backed vector store for a single tenant."""

    def __init__(self, dimension: int = 768, path: str | None = None):
        try:
            import faiss
        except ImportError as exc:
            raise ImportError(
                "faiss-cpu required: pip install tutor-knowledge-rag[faiss]"
            ) from exc

        self._faiss = faiss
        self._dimension = dimension
        self._index = faiss.IndexFlatIP(dimension)  # Inner product (cosine after normalization)
        self._records: list[dict[str, Any]] = []  # row position -> {id, document_id, ...}

        if path and (Path(path) / "index.faiss").exists():
            self.load(path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def add(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        vectors = self._as_matrix([r.embedding for r in records])
        self._index.add(vectors)

        for record in records:
            self._records.append({
                "id": record.id,
                "document_id": record.document_id,
                "chunk_index": record.chunk_index,
                "text": record.text,
                "metadata": record.metadata,
            })

        logger.info("FAISSStore added %d records (total: %d)", len(records), self._index.ntotal)
        return len(records)

    async def similarity_search(
        self,
        query_embedding: list[float],
        threshold: float = 0.0,
        limit: int = 5,
    ) -> list[SearchResult]:
        if self._index.ntotal == 0 or limit <= 0:
            return []

        query_vec = self._as_matrix([query_embedding])
        scores, indices = self._index.search(query_vec, min(limit, self._index.ntotal))

        results: list[SearchResult] = []
        for score, idx in zip(scores[0], indices[0], strict=True):
            if idx == -1 or float(score) < threshold:
                continue
            results.append(self._to_result(self._records[int(idx)], float(score)))

        return results

    async def text_search(self, query: str, limit: int = 5) -> list[SearchResult]:
        terms = query_terms(query)
        if not terms or limit <= 0:
            return []

        wanted = set(terms)
        scored: list[tuple[int, dict[str, Any]]] = []
        for record in self._records:
            hits = len(wanted & text_terms(record["text"]))
            if hits:
                scored.append((hits, record))

        # Stable sort keeps insertion order among equal hit counts
        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            self._to_result(record, hits / len(wanted))
            for hits, record in scored[:limit]
        ]

    async def count(self) -> int:
        return self._index.ntotal

    async def delete_document(self, document_id: str) -> int:
        keep = [i for i, r in enumerate(self._records) if r["document_id"] != document_id]
        deleted = len(self._records) - len(keep)
        if deleted == 0:
            return 0

        # IndexFlatIP has no native delete: rebuild from the stored vectors
        vectors = self._index.reconstruct_n(0, self._index.ntotal)
        self._index = self._faiss.IndexFlatIP(self._dimension)
        if keep:
            self._index.add(np.ascontiguousarray(vectors[keep]))
        self._records = [self._records[i] for i in keep]

        logger.info("FAISSStore deleted %d records of document %s", deleted, document_id)
        return deleted

    async def clear(self) -> None:
        self._index = self._faiss.IndexFlatIP(self._dimension)
        self._records.clear()

    def save(self, path: str) -> None:
        """Save FAISS index and chunk records to disk."""
        p = Path(path)
        p.mkdir(parents=True, exist_ok=True)

        self._faiss.write_index(self._index, str(p / "index.faiss"))

        serializable = [
            {
                "id": r["id"],
                "document_id": r["document_id"],
                "chunk_index": r["chunk_index"],
                "text": r["text"],
                "metadata": r["metadata"].to_dict(),
            }
            for r in self._records
        ]
        with open(p / "records.json", "w", encoding="utf-8") as f:
            json.dump({"dimension": self._dimension, "records": serializable}, f)

        logger.info("FAISSStore saved to %s (%d records)", path, self._index.ntotal)

    def load(self, path: str) -> None:
        """Load FAISS index and chunk records from disk."""
        p = Path(path)

        index = self._faiss.read_index(str(p / "index.faiss"))
        if index.d != self._dimension:
            raise StorageError(
                f"Stored index has dimension {index.d}, store expects {self._dimension}"
            )

        with open(p / "records.json", encoding="utf-8") as f:
            data = json.load(f)

        self._index = index
        self._records = [
            {
                "id": r["id"],
                "document_id": r["document_id"],
                "chunk_index": r["chunk_index"],
                "text": r["text"],
                "metadata": ChunkMetadata.from_dict(r.get("metadata")),
            }
            for r in data["records"]
        ]
        logger.info("FAISSStore loaded from %s (%d records)", path, self._index.ntotal)

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _as_matrix(self, vectors: list[list[float]]) -> np.ndarray:
        try:
            matrix = np.array(vectors, dtype=np.float32)
        except ValueError as exc:
            raise StorageError(f"Malformed vectors: {exc}") from exc
        if matrix.ndim != 2 or matrix.shape[1] != self._dimension:
            raise StorageError(
                f"Expected vectors of dimension {self._dimension}, got shape {matrix.shape}"
            )
        # L2-normalize for cosine similarity via inner product
        self._faiss.normalize_L2(matrix)
        return matrix

    @staticmethod
    def _to_result(record: dict[str, Any], score: float) -> SearchResult:
        return SearchResult(
            id=record["id"],
            document_id=record["document_id"],
            chunk_index=record["chunk_index"],
            text=record["text"],
            score=score,
            metadata=record["metadata"],
        )
