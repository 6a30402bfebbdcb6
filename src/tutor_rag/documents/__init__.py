"""Document records and input validation."""

from tutor_rag.documents.registry import (
    DocumentRegistry,
    InMemoryDocumentRegistry,
    get_document_registry,
)
from tutor_rag.documents.schemas import Document, UploadMode, infer_upload_mode
from tutor_rag.documents.validation import validate_content, validate_query

__all__ = [
    "Document",
    "DocumentRegistry",
    "InMemoryDocumentRegistry",
    "UploadMode",
    "get_document_registry",
    "infer_upload_mode",
    "validate_content",
    "validate_query",
]
