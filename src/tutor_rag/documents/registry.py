"""Document registry — creates and looks up document records."""

from __future__ import annotations

import importlib
import logging
import time
import uuid
from abc import ABC, abstractmethod

from tutor_rag.documents.schemas import Document, infer_upload_mode

logger = logging.getLogger(__name__)


def default_file_name() -> str:
    """Name used when a document arrives without one."""
    return f"document_{int(time.time() * 1000)}.txt"


class DocumentRegistry(ABC):
    """Interface for the store of document records."""

    @abstractmethod
    async def create(self, file_name: str | None, uploader_id: str) -> Document:
        """Register a new document.

        The upload mode and content type are inferred from ``file_name``;
        a missing name gets a timestamped default.

        Raises:
            StorageError: If the record cannot be written.
        """

    @abstractmethod
    async def get(self, document_id: str) -> Document | None:
        """Return the document with ``document_id``, or ``None``."""

    @classmethod
    def registry_name(cls) -> str:
        return cls.__name__


class InMemoryDocumentRegistry(DocumentRegistry):
    """Process-local registry, used for local runs and tests."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    async def create(self, file_name: str | None, uploader_id: str) -> Document:
        name = file_name or default_file_name()
        upload_mode, file_type = infer_upload_mode(name)
        document = Document(
            id=str(uuid.uuid4()),
            file_name=name,
            uploaded_by=uploader_id,
            file_type=file_type,
            upload_mode=upload_mode,
        )
        self._documents[document.id] = document
        logger.info("Registered document %s (%s)", document.id, name)
        return document

    async def get(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    def __len__(self) -> int:
        return len(self._documents)


# ---------------------------------------------------------------------------
# Registry factory: (backend_key, module_path, class_name)
# ---------------------------------------------------------------------------

_REGISTRY_BACKENDS: list[tuple[str, str, str]] = [
    ("memory", "tutor_rag.documents.registry", "InMemoryDocumentRegistry"),
    ("supabase", "tutor_rag.documents.supabase_registry", "SupabaseDocumentRegistry"),
]


def get_document_registry(backend: str = "memory", **kwargs) -> DocumentRegistry:
    """Get a document registry by backend name."""
    key = backend.lower()
    for reg_key, module_path, cls_name in _REGISTRY_BACKENDS:
        if reg_key == key:
            mod = importlib.import_module(module_path)
            return getattr(mod, cls_name)(**kwargs)

    available = [k for k, _, _ in _REGISTRY_BACKENDS]
    raise ValueError(f"Unknown document registry '{backend}'. Available: {available}")
