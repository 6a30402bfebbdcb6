"""Ingestion and query orchestration."""

from tutor_rag.pipeline.ingest import IngestionContext, IngestPipeline
from tutor_rag.pipeline.query import QueryPipeline, format_context
from tutor_rag.pipeline.schemas import IngestionReport, QueryMatch, RetrievalResult, SearchType

__all__ = [
    "IngestPipeline",
    "IngestionContext",
    "IngestionReport",
    "QueryMatch",
    "QueryPipeline",
    "RetrievalResult",
    "SearchType",
    "format_context",
]
