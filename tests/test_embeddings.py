"""Tests for the embedding tiers and chain — mock gateway, no network calls."""

from __future__ import annotations

import asyncio
import json

import httpx
import numpy as np
import pytest
from conftest import DIM, chat_reply, is_keyword_request, keyword_reply, vector_reply

from tutor_rag.config import EmbeddingSettings
from tutor_rag.embeddings.base import EmbeddingProvider
from tutor_rag.embeddings.chain import EmbeddingChain
from tutor_rag.embeddings.factory import (
    available_providers,
    build_embedding_chain,
    get_embedding_provider,
)
from tutor_rag.embeddings.gateway import extract_json_array
from tutor_rag.embeddings.hash_provider import PureHashProvider
from tutor_rag.embeddings.hashing import hash_embedding, keyword_hash_embedding
from tutor_rag.embeddings.keyword_provider import KeywordHashProvider, parse_keyword_response
from tutor_rag.embeddings.schemas import EmbeddingResult, EmbeddingTier, ProviderFailure
from tutor_rag.embeddings.semantic_provider import SemanticProvider, parse_vector_response
from tutor_rag.exceptions import ConfigurationError, EmbeddingDimensionError, GatewayError


def _norm(vector: list[float]) -> float:
    return float(np.linalg.norm(np.array(vector)))


# ---------------------------------------------------------------------------
# Test providers
# ---------------------------------------------------------------------------


class StaticProvider(EmbeddingProvider):
    """Returns the same outcome for every text and counts calls."""

    def __init__(self, outcome: EmbeddingResult | ProviderFailure, dimension: int = DIM):
        self.outcome = outcome
        self.calls = 0
        self._dim = dimension

    async def embed(self, text, timeout=None):
        self.calls += 1
        return self.outcome

    @property
    def dimension(self) -> int:
        return self._dim


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


class TestHashEmbedding:
    def test_dimension_and_norm(self):
        vec = hash_embedding("The cell membrane controls transport.")
        assert len(vec) == DIM
        assert _norm(vec) == pytest.approx(1.0, abs=1e-6)

    def test_deterministic(self):
        assert hash_embedding("Osmosis") == hash_embedding("Osmosis")

    def test_case_insensitive(self):
        assert hash_embedding("DNA Replication") == hash_embedding("dna replication")

    def test_different_texts_differ(self):
        assert hash_embedding("mitosis") != hash_embedding("meiosis")

    def test_empty_text_is_zero_vector(self):
        vec = hash_embedding("")
        assert len(vec) == DIM
        assert not any(vec)

    def test_custom_dimension(self):
        vec = hash_embedding("enzymes", dimension=32)
        assert len(vec) == 32
        assert _norm(vec) == pytest.approx(1.0, abs=1e-6)

    def test_non_ascii(self):
        vec = hash_embedding("La fotosíntesis ocurre en los cloroplastos")
        assert _norm(vec) == pytest.approx(1.0, abs=1e-6)


class TestKeywordHashEmbedding:
    def test_norm(self):
        vec = keyword_hash_embedding("cells make energy", ["mitochondria", "ATP"])
        assert len(vec) == DIM
        assert _norm(vec) == pytest.approx(1.0, abs=1e-6)

    def test_keywords_change_vector(self):
        plain = hash_embedding("cells make energy")
        boosted = keyword_hash_embedding("cells make energy", ["mitochondria"])
        assert plain != boosted

    def test_keyword_order_matters(self):
        a = keyword_hash_embedding("text", ["alpha", "beta"])
        b = keyword_hash_embedding("text", ["beta", "alpha"])
        assert a != b

    def test_deterministic(self):
        args = ("photosynthesis in leaves", ["chlorophyll", "light"])
        assert keyword_hash_embedding(*args) == keyword_hash_embedding(*args)


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------


class TestExtractJsonArray:
    def test_plain(self):
        assert extract_json_array("[1, 2, 3]") == [1, 2, 3]

    def test_code_fence(self):
        assert extract_json_array('```json\n["a", "b"]\n```') == ["a", "b"]

    def test_surrounding_prose(self):
        assert extract_json_array("Here you go: [0.1, 0.2] hope it helps") == [0.1, 0.2]

    def test_no_array(self):
        with pytest.raises(ValueError):
            extract_json_array("I cannot do that")

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            extract_json_array("[1, 2,, 3]")


class TestParseVectorResponse:
    def test_valid_vector_is_normalized(self):
        result = parse_vector_response(json.dumps([0.5] * DIM), DIM)
        assert isinstance(result, EmbeddingResult)
        assert result.tier == EmbeddingTier.SEMANTIC
        assert len(result.vector) == DIM
        assert _norm(result.vector) == pytest.approx(1.0, abs=1e-6)

    def test_truncates_extra_numbers(self):
        result = parse_vector_response(json.dumps([0.2] * (DIM + 40)), DIM)
        assert isinstance(result, EmbeddingResult)
        assert len(result.vector) == DIM

    def test_too_few_numbers(self):
        result = parse_vector_response(json.dumps([0.2] * 10), DIM)
        assert isinstance(result, ProviderFailure)
        assert "expected" in result.reason

    def test_non_numeric_entries_skipped(self):
        values = ["x", None, True] + [0.3] * DIM
        result = parse_vector_response(json.dumps(values), DIM)
        assert isinstance(result, EmbeddingResult)

    def test_values_clipped(self):
        values = [5.0] + [0.0] * (DIM - 1)
        result = parse_vector_response(json.dumps(values), DIM)
        assert isinstance(result, EmbeddingResult)
        assert result.vector[0] == pytest.approx(1.0)

    def test_zero_vector_fails(self):
        result = parse_vector_response(json.dumps([0] * DIM), DIM)
        assert isinstance(result, ProviderFailure)

    def test_malformed(self):
        result = parse_vector_response("sorry, no vector", DIM)
        assert isinstance(result, ProviderFailure)
        assert result.provider == "SemanticProvider"


class TestParseKeywordResponse:
    def test_keeps_strings(self):
        assert parse_keyword_response('["ATP", " cell ", 3, ""]') == ["ATP", "cell"]

    def test_limit(self):
        words = [f"kw{i}" for i in range(80)]
        assert len(parse_keyword_response(json.dumps(words), max_keywords=50)) == 50

    def test_empty_list_fails(self):
        assert isinstance(parse_keyword_response("[]"), ProviderFailure)

    def test_malformed(self):
        assert isinstance(parse_keyword_response("no keywords here"), ProviderFailure)


# ---------------------------------------------------------------------------
# Gateway client
# ---------------------------------------------------------------------------


class TestGatewayClient:
    @pytest.mark.asyncio
    async def test_sends_chat_completion(self, make_gateway):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return chat_reply("hello")

        gateway = make_gateway(handler)
        assert await gateway.complete("system prompt", "user text") == "hello"

        request = seen[0]
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"
        body = json.loads(request.content)
        assert body["model"] == "test-model"
        assert body["messages"][0] == {"role": "system", "content": "system prompt"}
        assert body["messages"][1] == {"role": "user", "content": "user text"}

    @pytest.mark.asyncio
    async def test_http_error_status(self, make_gateway):
        gateway = make_gateway(lambda request: httpx.Response(429, json={"error": "rate"}))
        with pytest.raises(GatewayError, match="429"):
            await gateway.complete("s", "u")

    @pytest.mark.asyncio
    async def test_transport_error(self, make_gateway):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GatewayError):
            await make_gateway(handler).complete("s", "u")

    @pytest.mark.asyncio
    async def test_missing_content(self, make_gateway):
        gateway = make_gateway(lambda request: httpx.Response(200, json={"choices": []}))
        with pytest.raises(GatewayError):
            await gateway.complete("s", "u")

    @pytest.mark.asyncio
    async def test_non_json_body(self, make_gateway):
        gateway = make_gateway(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(GatewayError):
            await gateway.complete("s", "u")


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class TestSemanticProvider:
    @pytest.mark.asyncio
    async def test_success(self, make_gateway):
        provider = SemanticProvider(make_gateway(lambda request: vector_reply()), DIM)
        result = await provider.embed("what is osmosis?")
        assert isinstance(result, EmbeddingResult)
        assert result.tier == EmbeddingTier.SEMANTIC
        assert _norm(result.vector) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.asyncio
    async def test_truncates_input(self, make_gateway):
        seen: list[str] = []

        def handler(request):
            seen.append(json.loads(request.content)["messages"][1]["content"])
            return vector_reply()

        provider = SemanticProvider(make_gateway(handler), DIM, max_input_chars=100)
        await provider.embed("y" * 5000)
        assert "y" * 100 in seen[0]
        assert "y" * 101 not in seen[0]

    @pytest.mark.asyncio
    async def test_timeout_is_failure(self, make_gateway):
        async def slow(request):
            await asyncio.sleep(1.0)
            return vector_reply()

        provider = SemanticProvider(make_gateway(slow), DIM)
        result = await provider.embed("text", timeout=0.05)
        assert isinstance(result, ProviderFailure)
        assert "timed out" in result.reason

    @pytest.mark.asyncio
    async def test_server_error_is_failure(self, make_gateway):
        provider = SemanticProvider(make_gateway(lambda r: httpx.Response(500)), DIM)
        assert isinstance(await provider.embed("text"), ProviderFailure)

    @pytest.mark.asyncio
    async def test_malformed_reply_is_failure(self, make_gateway):
        provider = SemanticProvider(make_gateway(lambda r: chat_reply("no idea")), DIM)
        assert isinstance(await provider.embed("text"), ProviderFailure)


class TestKeywordHashProvider:
    @pytest.mark.asyncio
    async def test_success(self, make_gateway):
        gateway = make_gateway(lambda r: keyword_reply(["mitochondria", "energy"]))
        provider = KeywordHashProvider(gateway, DIM)
        result = await provider.embed("The mitochondria makes energy")
        assert isinstance(result, EmbeddingResult)
        assert result.tier == EmbeddingTier.KEYWORD_HASH
        assert result.vector == keyword_hash_embedding(
            "The mitochondria makes energy", ["mitochondria", "energy"], DIM
        )

    @pytest.mark.asyncio
    async def test_sends_keyword_prompt(self, make_gateway):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return keyword_reply(["a"])

        await KeywordHashProvider(make_gateway(handler), DIM).embed("text")
        assert is_keyword_request(seen[0])

    @pytest.mark.asyncio
    async def test_empty_keywords_is_failure(self, make_gateway):
        provider = KeywordHashProvider(make_gateway(lambda r: keyword_reply([])), DIM)
        assert isinstance(await provider.embed("text"), ProviderFailure)

    @pytest.mark.asyncio
    async def test_gateway_down_is_failure(self, make_gateway):
        provider = KeywordHashProvider(make_gateway(lambda r: httpx.Response(503)), DIM)
        assert isinstance(await provider.embed("text"), ProviderFailure)


class TestPureHashProvider:
    @pytest.mark.asyncio
    async def test_always_succeeds(self):
        result = await PureHashProvider(DIM).embed("anything at all")
        assert result.tier == EmbeddingTier.HASH_FALLBACK
        assert result.vector == hash_embedding("anything at all", DIM)

    def test_sync(self):
        assert PureHashProvider(16).embed_sync("x").tier == EmbeddingTier.HASH_FALLBACK

    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            EmbeddingProvider()  # type: ignore[abstract]


# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------


class TestEmbeddingChain:
    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        good = EmbeddingResult(vector=hash_embedding("a"), tier=EmbeddingTier.SEMANTIC)
        first = StaticProvider(good)
        second = StaticProvider(good)
        result = await EmbeddingChain([first, second]).embed("a")
        assert result.tier == EmbeddingTier.SEMANTIC
        assert first.calls == 1
        assert second.calls == 0

    @pytest.mark.asyncio
    async def test_falls_through_to_next_tier(self):
        failing = StaticProvider(ProviderFailure("SemanticProvider", "timeout"))
        keyword = StaticProvider(
            EmbeddingResult(vector=hash_embedding("b"), tier=EmbeddingTier.KEYWORD_HASH)
        )
        result = await EmbeddingChain([failing, keyword]).embed("b")
        assert result.tier == EmbeddingTier.KEYWORD_HASH
        assert failing.calls == 1

    @pytest.mark.asyncio
    async def test_all_fail_uses_hash(self):
        chain = EmbeddingChain([
            StaticProvider(ProviderFailure("SemanticProvider", "down")),
            StaticProvider(ProviderFailure("KeywordHashProvider", "down")),
        ])
        result = await chain.embed("The cell")
        assert result.tier == EmbeddingTier.HASH_FALLBACK
        assert result.vector == hash_embedding("The cell")

    @pytest.mark.asyncio
    async def test_empty_chain_uses_hash(self):
        result = await EmbeddingChain([]).embed("text")
        assert result.tier == EmbeddingTier.HASH_FALLBACK

    @pytest.mark.asyncio
    async def test_wrong_length_raises(self):
        bad = StaticProvider(EmbeddingResult(vector=[1.0] * 10, tier=EmbeddingTier.SEMANTIC))
        with pytest.raises(EmbeddingDimensionError) as exc_info:
            await EmbeddingChain([bad]).embed("text")
        assert exc_info.value.actual == 10
        assert exc_info.value.expected == DIM

    def test_dimension_mismatch_at_construction(self):
        with pytest.raises(ConfigurationError):
            EmbeddingChain([PureHashProvider(32)], dimension=DIM)

    def test_fallback_is_deterministic(self):
        chain = EmbeddingChain([])
        assert chain.fallback("ATP synthase").vector == chain.fallback("ATP synthase").vector

    @pytest.mark.asyncio
    async def test_gateway_tiers_end_to_end(self, make_gateway):
        def handler(request):
            if is_keyword_request(request):
                return keyword_reply(["photosynthesis"])
            return chat_reply("I refuse to output numbers")

        gateway = make_gateway(handler)
        chain = EmbeddingChain([
            SemanticProvider(gateway, DIM),
            KeywordHashProvider(gateway, DIM),
        ])
        result = await chain.embed("Photosynthesis happens in chloroplasts")
        assert result.tier == EmbeddingTier.KEYWORD_HASH
        assert _norm(result.vector) == pytest.approx(1.0, abs=1e-6)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestEmbeddingFactory:
    def test_available_providers(self):
        assert available_providers() == ["semantic", "keyword", "hash"]

    def test_get_hash_provider(self):
        provider = get_embedding_provider("hash", dimension=64)
        assert isinstance(provider, PureHashProvider)
        assert provider.dimension == 64

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            get_embedding_provider("word2vec")

    def test_chain_without_api_key_skips_remote_tiers(self):
        chain = build_embedding_chain(EmbeddingSettings(api_key=None))
        assert chain.describe() == ["PureHashProvider"]

    def test_chain_with_api_key(self):
        transport = httpx.MockTransport(lambda r: vector_reply())
        chain = build_embedding_chain(EmbeddingSettings(api_key="k"), transport=transport)
        assert chain.describe() == ["SemanticProvider", "KeywordHashProvider", "PureHashProvider"]

    @pytest.mark.asyncio
    async def test_chain_uses_transport(self):
        transport = httpx.MockTransport(lambda r: vector_reply())
        chain = build_embedding_chain(EmbeddingSettings(api_key="k"), transport=transport)
        result = await chain.embed("cells")
        assert result.tier == EmbeddingTier.SEMANTIC
