"""Document registry backed by the Supabase ``uploaded_documents`` table."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from tutor_rag.documents.registry import DocumentRegistry, default_file_name
from tutor_rag.documents.schemas import Document, UploadMode, infer_upload_mode
from tutor_rag.exceptions import StorageError

logger = logging.getLogger(__name__)


def _row_to_document(row: dict[str, Any]) -> Document:
    try:
        return _parse_document_row(row)
    except (TypeError, ValueError, KeyError, AttributeError) as exc:
        logger.error("Malformed document row: %s", exc)
        raise StorageError(f"Malformed document row: {exc}") from exc


def _parse_document_row(row: dict[str, Any]) -> Document:
    created = row.get("created_at")
    kwargs: dict[str, Any] = {}
    if created:
        kwargs["created_at"] = datetime.fromisoformat(str(created).replace("Z", "+00:00"))
    return Document(
        id=str(row["id"]),
        file_name=row["file_name"],
        uploaded_by=row["uploaded_by"],
        file_type=row.get("file_type") or "text/plain",
        upload_mode=UploadMode(row.get("upload_mode") or UploadMode.TEXT),
        **kwargs,
    )


class SupabaseDocumentRegistry(DocumentRegistry):
    """Create and read document records through the Supabase REST API."""

    def __init__(self, client: Client, table: str = "uploaded_documents"):
        self._client = client
        self.table = table

    async def create(self, file_name: str | None, uploader_id: str) -> Document:
        name = file_name or default_file_name()
        upload_mode, file_type = infer_upload_mode(name)
        row = {
            "uploaded_by": uploader_id,
            "file_name": name,
            "file_type": file_type,
            "upload_mode": upload_mode.value,
        }

        try:
            response = await asyncio.to_thread(
                lambda: self._client.table(self.table).insert(row).execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise StorageError(f"Failed to create document: {exc}") from exc

        if not response.data:
            raise StorageError("Failed to create document: no row returned")

        document = _row_to_document(response.data[0])
        logger.info("Created document %s (%s)", document.id, name)
        return document

    async def get(self, document_id: str) -> Document | None:
        try:
            response = await asyncio.to_thread(
                lambda: self._client.table(self.table)
                .select("*")
                .eq("id", document_id)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise StorageError(f"Failed to read document {document_id}: {exc}") from exc

        if not response.data:
            return None
        return _row_to_document(response.data[0])
