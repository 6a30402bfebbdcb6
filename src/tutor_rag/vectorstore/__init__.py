"""Vector store backends — FAISS (local) and Supabase pgvector (production)."""

from tutor_rag.vectorstore.base import VectorStore
from tutor_rag.vectorstore.factory import available_stores, get_vector_store
from tutor_rag.vectorstore.schemas import SearchResult, VectorRecord

__all__ = [
    "SearchResult",
    "VectorRecord",
    "VectorStore",
    "available_stores",
    "get_vector_store",
]
