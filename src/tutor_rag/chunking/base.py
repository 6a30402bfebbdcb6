"""Abstract base class for all chunkers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tutor_rag.chunking.schemas import Chunk


class BaseChunker(ABC):
    """Interface for document chunking strategies."""

    @abstractmethod
    def chunk(self, text: str) -> list[Chunk]:
        """Split text into chunks.

        Args:
            text: Full document text.

        Returns:
            List of ``Chunk`` objects numbered from 0.
        """

    @classmethod
    def strategy_name(cls) -> str:
        """Return human-readable strategy name."""
        return cls.__name__
