"""Abstract base class for vector stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tutor_rag.vectorstore.schemas import SearchResult, VectorRecord


class VectorStore(ABC):
    """Interface for vector store backends.

    Backend-specific failures are raised as ``StorageError`` so callers can
    tell "search broken" apart from "no rows above the threshold".
    """

    @abstractmethod
    async def add(self, records: list[VectorRecord]) -> int:
        """Insert records into the store in one bulk write.

        Args:
            records: Chunks with embeddings.

        Returns:
            Number of records successfully inserted.
        """

    @abstractmethod
    async def similarity_search(
        self,
        query_embedding: list[float],
        threshold: float = 0.0,
        limit: int = 5,
    ) -> list[SearchResult]:
        """Search for chunks similar to ``query_embedding``.

        Args:
            query_embedding: The query vector.
            threshold: Minimum similarity score to keep.
            limit: Maximum results to return.

        Returns:
            List of ``SearchResult`` sorted by similarity (highest first).
        """

    @abstractmethod
    async def text_search(self, query: str, limit: int = 5) -> list[SearchResult]:
        """Lexical search: chunks containing any whitespace token of ``query``.

        Args:
            query: Free-text query; its tokens are OR-ed together.
            limit: Maximum results to return.

        Returns:
            List of ``SearchResult`` in store-defined order.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of records in the store."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> int:
        """Delete every chunk of a document.

        Returns:
            Number of records deleted.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Delete all records."""

    def save(self, path: str) -> None:
        """Persist the store to disk (optional)."""
        raise NotImplementedError(f"{self.__class__.__name__} does not support save()")

    def load(self, path: str) -> None:
        """Load the store from disk (optional)."""
        raise NotImplementedError(f"{self.__class__.__name__} does not support load()")

    @classmethod
    def store_name(cls) -> str:
        """Return human-readable store name."""
        return cls.__name__
