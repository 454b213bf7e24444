"""Tests for embedding providers against a mocked HTTP transport."""

import json

import httpx
import pytest

from talentmatch.core import Settings
from talentmatch.providers import (
    EmbeddingDimensionError,
    EmbeddingServiceError,
    get_embedding_provider,
)
from talentmatch.providers.embedding import (
    GeminiEmbeddingProvider,
    OpenAICompatibleEmbeddingProvider,
)


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient through a handler; returns the list of seen requests."""
    seen: list[httpx.Request] = []
    state = {"handler": None}
    real_client = httpx.AsyncClient

    def _transport(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return state["handler"](request)

    def _client(**kwargs):
        return real_client(transport=httpx.MockTransport(_transport), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", _client)

    def install(handler):
        state["handler"] = handler
        return seen

    return install


class TestGeminiEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_batch_embed_request_and_response(self, mock_http):
        seen = mock_http(
            lambda req: httpx.Response(
                200, json={"embeddings": [{"values": [0.1, 0.2, 0.3]}, {"values": [0.4, 0.5, 0.6]}]}
            )
        )
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)

        vectors = await provider.embed(["first", "second"])

        assert vectors == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
        request = seen[0]
        assert request.url.path.endswith("/models/embedding-001:batchEmbedContents")
        assert request.headers["x-goog-api-key"] == "k"
        body = json.loads(request.content)
        assert [r["content"]["parts"][0]["text"] for r in body["requests"]] == ["first", "second"]
        assert all(r["model"] == "models/embedding-001" for r in body["requests"])

    @pytest.mark.asyncio
    async def test_http_error_maps_to_service_error(self, mock_http):
        mock_http(lambda req: httpx.Response(503, json={"error": "down"}))
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        with pytest.raises(EmbeddingServiceError, match="503"):
            await provider.embed(["text"])

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_service_error(self, mock_http):
        def _boom(req):
            raise httpx.ConnectError("refused", request=req)

        mock_http(_boom)
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        with pytest.raises(EmbeddingServiceError, match="unavailable"):
            await provider.embed(["text"])

    @pytest.mark.asyncio
    async def test_unexpected_shape_maps_to_service_error(self, mock_http):
        mock_http(lambda req: httpx.Response(200, json={"nope": []}))
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        with pytest.raises(EmbeddingServiceError, match="unexpected response format"):
            await provider.embed(["text"])

    @pytest.mark.asyncio
    async def test_vector_count_mismatch(self, mock_http):
        mock_http(lambda req: httpx.Response(200, json={"embeddings": [{"values": [0.1, 0.2, 0.3]}]}))
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        with pytest.raises(EmbeddingServiceError, match="expected 2"):
            await provider.embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_embed_one_rejects_wrong_dimension(self, mock_http):
        mock_http(lambda req: httpx.Response(200, json={"embeddings": [{"values": [0.1, 0.2]}]}))
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        with pytest.raises(EmbeddingDimensionError):
            await provider.embed_one("text")

    @pytest.mark.asyncio
    async def test_embed_one_rejects_empty_vector(self, mock_http):
        mock_http(lambda req: httpx.Response(200, json={"embeddings": [{"values": []}]}))
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        with pytest.raises(EmbeddingServiceError):
            await provider.embed_one("text")

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self, mock_http):
        seen = mock_http(lambda req: httpx.Response(500))
        provider = GeminiEmbeddingProvider(api_key="k", model="embedding-001", dimension=3)
        assert await provider.embed([]) == []
        assert seen == []


class TestOpenAICompatibleEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_results_sorted_by_index(self, mock_http):
        seen = mock_http(
            lambda req: httpx.Response(
                200,
                json={"data": [
                    {"index": 1, "embedding": [0.0, 1.0]},
                    {"index": 0, "embedding": [1.0, 0.0]},
                ]},
            )
        )
        provider = OpenAICompatibleEmbeddingProvider(
            base_url="http://embed.local", api_key="secret", model="m", dimension=2
        )

        vectors = await provider.embed(["a", "b"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        assert str(seen[0].url) == "http://embed.local/v1/embeddings"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_invalid_json_maps_to_service_error(self, mock_http):
        mock_http(lambda req: httpx.Response(200, content=b"not json"))
        provider = OpenAICompatibleEmbeddingProvider(
            base_url="http://embed.local/v1", api_key=None, model="m", dimension=2
        )
        with pytest.raises(EmbeddingServiceError):
            await provider.embed(["a"])


class TestGetEmbeddingProvider:
    def test_gemini_from_settings(self):
        provider = get_embedding_provider(Settings(_env_file=None, gemini_api_key="g", embed_dimension=768))
        assert isinstance(provider, GeminiEmbeddingProvider)
        assert provider.dimension == 768

    def test_openai_compatible_from_settings(self):
        provider = get_embedding_provider(
            Settings(_env_file=None, embed_provider="openai", embed_api_base_url="http://embed.local")
        )
        assert isinstance(provider, OpenAICompatibleEmbeddingProvider)

    def test_unconfigured_raises(self):
        with pytest.raises(RuntimeError, match="not configured"):
            get_embedding_provider(
                Settings(_env_file=None, embed_provider="gemini", gemini_api_key=None, embed_api_key=None)
            )
