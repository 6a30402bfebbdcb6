"""Data models for chunks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ChunkMetadata:
    """Metadata carried by each chunk — stored alongside embeddings."""

    file_name: str | None = None
    chunk_index: int = 0
    total_chunks: int = 0
    uploader_id: str | None = None
    embedding_tier: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "chunk_index": self.chunk_index,
            "total_chunks": self.total_chunks,
            "uploader_id": self.uploader_id,
            "embedding_tier": self.embedding_tier,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ChunkMetadata:
        data = data or {}
        return cls(
            file_name=data.get("file_name"),
            chunk_index=int(data.get("chunk_index", 0)),
            total_chunks=int(data.get("total_chunks", 0)),
            uploader_id=data.get("uploader_id"),
            embedding_tier=data.get("embedding_tier"),
        )


@dataclass
class Chunk:
    """A single retrievable window of a document."""

    text: str
    chunk_index: int = 0
    total_chunks: int = 0
    start: int = 0

    @property
    def end(self) -> int:
        return self.start + len(self.text)
