"""Shared fixtures for tests — synthetic documents, no network calls."""

from __future__ import annotations

import json
import textwrap
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from tutor_rag.chunking.schemas import ChunkMetadata
from tutor_rag.embeddings.gateway import GatewayClient

DIM = 768

# ---------------------------------------------------------------------------
# Directory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory."""
    return tmp_path


# ---------------------------------------------------------------------------
# Synthetic document content
# ---------------------------------------------------------------------------


@pytest.fixture
def mitochondria_text() -> str:
    """2400 characters of a single repeated biology sentence."""
    return "The mitochondria is the powerhouse of the cell. " * 50


@pytest.fixture
def sample_txt_content() -> str:
    return textwrap.dedent("""\
        Photosynthesis and Cellular Respiration

        Plants capture light energy in their chloroplasts and use it to turn
        carbon dioxide and water into glucose. Oxygen is released as a
        by-product of the light-dependent reactions.

        Cellular respiration runs the process in reverse. Glucose is broken
        down in the cytoplasm during glycolysis, and the mitochondria finish
        the job through the Krebs cycle and the electron transport chain,
        producing most of the cell's ATP.

        Study tip: remember that respiration happens in plant cells too.
    """)


@pytest.fixture
def sample_txt_file(tmp_path: Path, sample_txt_content: str) -> Path:
    p = tmp_path / "biology_notes.txt"
    p.write_text(sample_txt_content, encoding="utf-8")
    return p


@pytest.fixture
def sample_chunk_metadata() -> ChunkMetadata:
    return ChunkMetadata(
        file_name="biology_notes.txt",
        chunk_index=0,
        total_chunks=1,
        uploader_id="tutor-1",
        embedding_tier="hash-fallback",
    )


# ---------------------------------------------------------------------------
# Gateway fakes
# ---------------------------------------------------------------------------


def chat_reply(content: str, status_code: int = 200) -> httpx.Response:
    """Build an OpenAI-style chat completion response."""
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
    )


def vector_reply(dimension: int = DIM, value: float = 0.5) -> httpx.Response:
    return chat_reply(json.dumps([value] * dimension))


def keyword_reply(keywords: list[str]) -> httpx.Response:
    return chat_reply(json.dumps(keywords))


def is_keyword_request(request: httpx.Request) -> bool:
    body = json.loads(request.content)
    return body["messages"][0]["content"].startswith("Extract the")


@pytest.fixture
def make_gateway() -> Callable[..., GatewayClient]:
    """Factory for a GatewayClient whose HTTP calls go to ``handler``."""

    def _make(handler, timeout: float = 5.0) -> GatewayClient:
        return GatewayClient(
            api_key="test-key",
            base_url="https://gateway.test/v1",
            model="test-model",
            timeout=timeout,
            transport=httpx.MockTransport(handler),
        )

    return _make
