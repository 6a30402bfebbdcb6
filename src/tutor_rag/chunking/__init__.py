"""Overlapping fixed-size text chunking."""

from tutor_rag.chunking.base import BaseChunker
from tutor_rag.chunking.schemas import Chunk, ChunkMetadata
from tutor_rag.chunking.window_chunker import TextWindows, WindowChunker, chunk_text

__all__ = [
    "BaseChunker",
    "Chunk",
    "ChunkMetadata",
    "TextWindows",
    "WindowChunker",
    "chunk_text",
]
