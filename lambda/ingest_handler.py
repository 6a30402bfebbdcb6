"""Lambda handler for document ingestion — triggered by API Gateway.

Thin wrapper around IngestPipeline. All business logic lives in src/tutor_rag/.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any

from tutor_rag.config import load_settings
from tutor_rag.exceptions import IngestionIncompleteError, InvalidContentError, StorageError
from tutor_rag.pipeline.factory import build_ingest_pipeline
from tutor_rag.pipeline.ingest import IngestPipeline

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

# Initialize outside handler for Lambda warm-start reuse
_pipeline: IngestPipeline | None = None
_store_path: str | None = None


def _get_pipeline() -> IngestPipeline:
    global _pipeline, _store_path
    if _pipeline is not None:
        return _pipeline

    settings = load_settings()
    _pipeline = build_ingest_pipeline(settings)
    if settings.vectorstore.backend == "faiss":
        _store_path = settings.vectorstore.path
    return _pipeline


def _response(status: int, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle API Gateway request — parse body, ingest text, return JSON."""
    try:
        body = json.loads(event.get("body") or "{}")
    except (json.JSONDecodeError, TypeError):
        body = {}
    if not isinstance(body, dict):
        body = {}

    content = body.get("content")
    user_id = body.get("user_id")
    if not isinstance(content, str) or not content or not user_id:
        return _response(400, {
            "success": False,
            "error": "Missing 'content' or 'user_id' field, or 'content' is not text",
        })

    pipeline = _get_pipeline()
    try:
        report = asyncio.run(pipeline.ingest(
            content,
            file_name=body.get("file_name"),
            uploader_id=user_id,
            document_id=body.get("document_id"),
        ))
    except InvalidContentError as exc:
        return _response(400, {"success": False, "error": str(exc)})
    except (IngestionIncompleteError, StorageError) as exc:
        logger.error("Ingestion failed: %s", exc)
        return _response(500, {"success": False, "error": str(exc)})

    if _store_path:
        pipeline.vector_store.save(_store_path)

    if report.partial:
        message = report.warnings[0]
    else:
        message = f"Document processed: {report.chunks_persisted} chunks indexed"

    return _response(200, {
        "success": True,
        "document_id": report.document_id,
        "chunks_processed": report.chunks_processed,
        "chunks_persisted": report.chunks_persisted,
        "partial": report.partial,
        "tier_counts": report.tier_counts,
        "message": message,
    })
