"""Lambda handler for knowledge-base queries — triggered by API Gateway.

Thin wrapper around QueryPipeline. All business logic lives in src/tutor_rag/.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any

from tutor_rag.config import load_settings
from tutor_rag.exceptions import InvalidQueryError
from tutor_rag.pipeline.factory import build_query_pipeline
from tutor_rag.pipeline.query import QueryPipeline

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

# Initialize outside handler for Lambda warm-start reuse
_pipeline: QueryPipeline | None = None
_defaults: tuple[int, float] = (5, 0.3)


def _get_pipeline() -> QueryPipeline:
    global _pipeline, _defaults
    if _pipeline is not None:
        return _pipeline

    settings = load_settings()
    _pipeline = build_query_pipeline(settings)
    _defaults = (settings.retrieval.match_count, settings.retrieval.match_threshold)
    return _pipeline


def _response(status: int, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle API Gateway request — parse query, run pipeline, return JSON."""
    try:
        body = json.loads(event.get("body") or "{}")
    except (json.JSONDecodeError, TypeError):
        body = {}
    if not isinstance(body, dict):
        body = {}

    query = body.get("query", "")
    if not isinstance(query, str) or not query.strip():
        return _response(400, {"success": False, "error": "Missing 'query' field"})

    pipeline = _get_pipeline()
    default_count, default_threshold = _defaults

    # null counts as absent
    match_count = body.get("match_count")
    match_threshold = body.get("match_threshold")
    try:
        match_count = default_count if match_count is None else int(match_count)
        match_threshold = (
            default_threshold if match_threshold is None else float(match_threshold)
        )
    except (TypeError, ValueError, OverflowError):
        return _response(400, {
            "success": False,
            "error": "'match_count' must be an integer and 'match_threshold' a number",
        })

    try:
        result = asyncio.run(pipeline.retrieve(
            query, match_count=match_count, match_threshold=match_threshold
        ))
    except InvalidQueryError as exc:
        return _response(400, {"success": False, "error": str(exc)})

    return _response(200, {
        "success": True,
        "results": [
            {
                "id": m.chunk_id,
                "document_id": m.document_id,
                "chunk_index": m.chunk_index,
                "similarity": m.score,
                "content": m.content,
            }
            for m in result.matches
        ],
        "context": result.context,
        "search_type": result.search_type.value,
    })
