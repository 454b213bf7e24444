"""Tests for chat providers against a mocked HTTP transport."""

import json

import httpx
import pytest

from talentmatch.core import Settings
from talentmatch.providers import ChatRateLimitError, ChatServiceError, get_chat_provider
from talentmatch.providers import chat as chat_module
from talentmatch.providers.chat import (
    GeminiChatProvider,
    OpenAIChatProvider,
    OpenAICompatibleChatProvider,
)


@pytest.fixture
def mock_http(monkeypatch):
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


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestGeminiChatProvider:
    @pytest.mark.asyncio
    async def test_generate_content_request(self, mock_http):
        seen = mock_http(lambda req: httpx.Response(200, json=_gemini_reply('{"analysis": "ok"}')))
        provider = GeminiChatProvider(api_key="k", model="gemini-1.5-flash")

        reply = await provider.chat("rank these", max_tokens=100, temperature=0.1, json_output=True)

        assert reply == '{"analysis": "ok"}'
        request = seen[0]
        assert request.url.path.endswith("/models/gemini-1.5-flash:generateContent")
        assert request.headers["x-goog-api-key"] == "k"
        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "rank these"
        assert body["generationConfig"]["maxOutputTokens"] == 100
        assert body["generationConfig"]["responseMimeType"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_candidates_is_service_error(self, mock_http):
        mock_http(lambda req: httpx.Response(200, json={"candidates": []}))
        provider = GeminiChatProvider(api_key="k", model="gemini-1.5-flash")
        with pytest.raises(ChatServiceError, match="no candidates"):
            await provider.chat("hi")

    @pytest.mark.asyncio
    async def test_server_error_is_service_error(self, mock_http):
        mock_http(lambda req: httpx.Response(500, text="boom"))
        provider = GeminiChatProvider(api_key="k", model="gemini-1.5-flash")
        with pytest.raises(ChatServiceError, match="500"):
            await provider.chat("hi")

    @pytest.mark.asyncio
    async def test_rate_limit_backoff_is_capped(self, mock_http, monkeypatch):
        seen = mock_http(lambda req: httpx.Response(429, headers={"Retry-After": "120"}))
        sleeps: list[float] = []

        async def fake_sleep(delay):
            sleeps.append(delay)

        monkeypatch.setattr(chat_module.asyncio, "sleep", fake_sleep)
        provider = GeminiChatProvider(api_key="k", model="gemini-1.5-flash", timeout=60.0)

        with pytest.raises(ChatRateLimitError):
            await provider.chat("hi")
        assert sleeps == [10.0, 10.0, 10.0]
        assert sum(sleeps) <= provider.timeout
        assert len(seen) == 4

    @pytest.mark.asyncio
    async def test_rate_limit_backoff_stays_within_timeout(self, mock_http, monkeypatch):
        seen = mock_http(lambda req: httpx.Response(429, headers={"Retry-After": "120"}))
        sleeps: list[float] = []

        async def fake_sleep(delay):
            sleeps.append(delay)

        monkeypatch.setattr(chat_module.asyncio, "sleep", fake_sleep)
        provider = GeminiChatProvider(api_key="k", model="gemini-1.5-flash", timeout=15.0)

        with pytest.raises(ChatRateLimitError):
            await provider.chat("hi")
        assert sleeps == [10.0]
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_timeout_is_service_error(self, mock_http):
        def _timeout(req):
            raise httpx.ReadTimeout("slow", request=req)

        mock_http(_timeout)
        provider = GeminiChatProvider(api_key="k", model="gemini-1.5-flash")
        with pytest.raises(ChatServiceError, match="unavailable"):
            await provider.chat("hi")


class TestOpenAICompatibleChatProvider:
    @pytest.mark.asyncio
    async def test_chat_completion(self, mock_http):
        seen = mock_http(
            lambda req: httpx.Response(200, json={"choices": [{"message": {"content": "  hello  "}}]})
        )
        provider = OpenAICompatibleChatProvider(base_url="http://llm.local", api_key="s", model="m")

        assert await provider.chat("hi", json_output=True) == "hello"
        assert str(seen[0].url) == "http://llm.local/v1/chat/completions"
        body = json.loads(seen[0].content)
        assert body["response_format"] == {"type": "json_object"}
        assert body["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_rate_limit_retried_then_succeeds(self, mock_http):
        responses = iter([
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(200, json={"choices": [{"message": {"content": "done"}}]}),
        ])
        seen = mock_http(lambda req: next(responses))
        provider = OpenAICompatibleChatProvider(base_url="http://llm.local/v1", api_key=None, model="m")

        assert await provider.chat("hi") == "done"
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_rate_limit_retries_are_bounded(self, mock_http):
        seen = mock_http(lambda req: httpx.Response(429, headers={"Retry-After": "0"}))
        provider = OpenAICompatibleChatProvider(base_url="http://llm.local/v1", api_key=None, model="m")

        with pytest.raises(ChatRateLimitError):
            await provider.chat("hi")
        assert len(seen) == 4

    @pytest.mark.asyncio
    async def test_empty_content_is_service_error(self, mock_http):
        mock_http(lambda req: httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}))
        provider = OpenAICompatibleChatProvider(base_url="http://llm.local/v1", api_key=None, model="m")
        with pytest.raises(ChatServiceError, match="empty content"):
            await provider.chat("hi")


class TestGetChatProvider:
    def test_gemini_default_model(self):
        provider = get_chat_provider(Settings(_env_file=None, gemini_api_key="g"))
        assert isinstance(provider, GeminiChatProvider)
        assert provider.model == "models/gemini-1.5-flash"

    def test_openai_official(self):
        provider = get_chat_provider(
            Settings(_env_file=None, chat_provider="openai", openai_api_key="o", chat_api_base_url=None)
        )
        assert isinstance(provider, OpenAIChatProvider)
        assert provider.model == "gpt-4o-mini"

    def test_unconfigured_raises(self):
        with pytest.raises(RuntimeError, match="not configured"):
            get_chat_provider(
                Settings(_env_file=None, chat_provider="gemini", gemini_api_key=None, chat_api_key=None)
            )
