"""Fixed-size character windows with overlap.

Window *i* starts at ``i * (size - overlap)`` and spans ``size`` characters,
clipped to the end of the text. Windowing stops at the first window that
reaches the end, so there are exactly
``max(1, ceil((len(text) - overlap) / (size - overlap)))`` windows for any
non-empty text.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from typing import overload

from tutor_rag.chunking.base import BaseChunker
from tutor_rag.chunking.schemas import Chunk
from tutor_rag.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 1000
DEFAULT_OVERLAP = 200


def _validate(size: int, overlap: int) -> None:
    if size <= 0:
        raise ConfigurationError(f"Chunk size must be positive, got {size}")
    if overlap < 0:
        raise ConfigurationError(f"Chunk overlap must not be negative, got {overlap}")
    if overlap >= size:
        raise ConfigurationError(
            f"Chunk overlap ({overlap}) must be smaller than chunk size ({size})"
        )


class TextWindows(Sequence[str]):
    """Lazy, restartable view over the windows of a text.

    Nothing is sliced until a window is requested; iterating twice yields
    the same windows.
    """

    def __init__(self, text: str, size: int = DEFAULT_SIZE, overlap: int = DEFAULT_OVERLAP):
        _validate(size, overlap)
        self._text = text
        self.size = size
        self.overlap = overlap
        self.step = size - overlap

    def __len__(self) -> int:
        if not self._text:
            return 0
        return max(1, math.ceil((len(self._text) - self.overlap) / self.step))

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> list[str]: ...

    def __getitem__(self, index: int | slice) -> str | list[str]:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]

        count = len(self)
        if index < 0:
            index += count
        if not 0 <= index < count:
            raise IndexError("window index out of range")

        start, end = self.bounds(index)
        return self._text[start:end]

    def __iter__(self) -> Iterator[str]:
        for i in range(len(self)):
            start, end = self.bounds(i)
            yield self._text[start:end]

    def bounds(self, index: int) -> tuple[int, int]:
        """Return the ``[start, end)`` character offsets of window ``index``."""
        start = index * self.step
        return start, min(start + self.size, len(self._text))


def chunk_text(
    text: str,
    size: int = DEFAULT_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> TextWindows:
    """Split ``text`` into overlapping windows.

    Raises:
        ConfigurationError: If ``overlap >= size`` (or either is out of range).
    """
    return TextWindows(text, size=size, overlap=overlap)


class WindowChunker(BaseChunker):
    """Chunker producing overlapping fixed-size character windows."""

    def __init__(self, size: int = DEFAULT_SIZE, overlap: int = DEFAULT_OVERLAP):
        _validate(size, overlap)
        self.size = size
        self.overlap = overlap

    def chunk(self, text: str) -> list[Chunk]:
        windows = chunk_text(text, size=self.size, overlap=self.overlap)
        total = len(windows)

        chunks = [
            Chunk(
                text=window,
                chunk_index=i,
                total_chunks=total,
                start=windows.bounds(i)[0],
            )
            for i, window in enumerate(windows)
        ]

        logger.info(
            "WindowChunker produced %d chunks from %d chars (size=%d, overlap=%d)",
            total, len(text), self.size, self.overlap,
        )
        return chunks
