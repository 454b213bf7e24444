import asyncio
import logging
from abc import ABC, abstractmethod

import httpx

from talentmatch.core import Settings, get_settings

from .embedding import GEMINI_API_BASE_URL

logger = logging.getLogger(__name__)


class ChatServiceError(Exception):
    """Raised when the chat/LLM API is unavailable or returns invalid or unexpected output."""


class ChatRateLimitError(ChatServiceError):
    """Raised when the chat/LLM API rate limits the request."""


# 429 handling: bounded retries, linear backoff capped per delay and by the request timeout
_RATE_LIMIT_RETRIES = 3
_RATE_LIMIT_BASE_DELAY_S = 1.0
_RATE_LIMIT_MAX_DELAY_S = 10.0


def _retry_delay(response: httpx.Response, attempt: int) -> float:
    retry_after = response.headers.get("Retry-After")
    try:
        delay_s = float(retry_after) if retry_after else _RATE_LIMIT_BASE_DELAY_S
    except ValueError:
        delay_s = _RATE_LIMIT_BASE_DELAY_S
    return min(delay_s * (attempt + 1), _RATE_LIMIT_MAX_DELAY_S)


class ChatProvider(ABC):
    @abstractmethod
    async def _chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 2048,
        temperature: float | None = None,
        json_output: bool = False,
    ) -> str:
        pass

    async def chat(
        self,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float | None = None,
        json_output: bool = False,
    ) -> str:
        """Send a single user message and return the assistant reply."""
        return await self._chat(
            [{"role": "user", "content": user_message}],
            max_tokens=max_tokens,
            temperature=temperature,
            json_output=json_output,
        )


class OpenAICompatibleChatProvider(ChatProvider):
    """OpenAI-compatible endpoint (vLLM, etc.)."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        model: str,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        if not self.base_url.endswith("/v1"):
            self.base_url = f"{self.base_url}/v1"
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    async def _chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 2048,
        temperature: float | None = None,
        json_output: bool = False,
    ) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature if temperature is not None else 0.2,
        }
        if json_output:
            payload["response_format"] = {"type": "json_object"}
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        slept_s = 0.0
        for attempt in range(_RATE_LIMIT_RETRIES + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    r = await client.post(
                        f"{self.base_url}/chat/completions",
                        json=payload,
                        headers=headers,
                    )
                    r.raise_for_status()
                    data = r.json()
                    choices = data.get("choices") or []
                    if not choices:
                        raise ChatServiceError(
                            "Chat API returned no choices (e.g. content filter)."
                        )
                    msg = choices[0].get("message") or {}
                    content = msg.get("content")
                    if content is None or not isinstance(content, str):
                        raise ChatServiceError(
                            "Chat API returned missing or non-string content."
                        )
                    stripped = content.strip()
                    if not stripped:
                        raise ChatServiceError(
                            "Chat API returned empty content (LLM may have failed or been rate-limited)."
                        )
                    return stripped
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    delay_s = _retry_delay(e.response, attempt)
                    # Total backoff stays within the request timeout budget
                    if attempt < _RATE_LIMIT_RETRIES and slept_s + delay_s <= self.timeout:
                        slept_s += delay_s
                        await asyncio.sleep(delay_s)
                        continue
                    raise ChatRateLimitError(
                        "Chat API rate limited the request. Please retry later."
                    ) from e
                body = getattr(e.response, "text", None) or ""
                if body:
                    logger.warning(
                        "Chat API error %s: %s",
                        e.response.status_code,
                        body[:500],
                    )
                raise ChatServiceError(
                    f"Chat API returned {e.response.status_code}. Please try again later."
                ) from e
            except httpx.RequestError as e:
                raise ChatServiceError(
                    "Chat service unavailable (timeout or connection error). Please try again later."
                ) from e
            except (KeyError, TypeError, IndexError, ValueError) as e:
                raise ChatServiceError("Chat API returned unexpected response format.") from e
        raise ChatServiceError("Chat API request failed.")


class OpenAIChatProvider(OpenAICompatibleChatProvider):
    """Official OpenAI API."""

    def __init__(self, settings: Settings):
        super().__init__(
            base_url="https://api.openai.com/v1",
            api_key=settings.openai_api_key,
            model=settings.chat_model or _OPENAI_DEFAULT_MODEL,
            timeout=settings.chat_timeout_seconds,
        )


class GeminiChatProvider(ChatProvider):
    """Google Generative Language API (generateContent)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = GEMINI_API_BASE_URL,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model if model.startswith("models/") else f"models/{model}"
        self.timeout = timeout

    async def _chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 2048,
        temperature: float | None = None,
        json_output: bool = False,
    ) -> str:
        generation_config = {
            "maxOutputTokens": max_tokens,
            "temperature": temperature if temperature is not None else 0.2,
        }
        if json_output:
            generation_config["responseMimeType"] = "application/json"
        payload = {
            "contents": [
                {
                    "role": "model" if m.get("role") == "assistant" else "user",
                    "parts": [{"text": m.get("content") or ""}],
                }
                for m in messages
            ],
            "generationConfig": generation_config,
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        slept_s = 0.0
        for attempt in range(_RATE_LIMIT_RETRIES + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    r = await client.post(
                        f"{self.base_url}/{self.model}:generateContent",
                        json=payload,
                        headers=headers,
                    )
                    r.raise_for_status()
                    data = r.json()
                    candidates = data.get("candidates") or []
                    if not candidates:
                        raise ChatServiceError(
                            "Chat API returned no candidates (e.g. safety block)."
                        )
                    parts = (candidates[0].get("content") or {}).get("parts") or []
                    text = "".join(p.get("text") or "" for p in parts).strip()
                    if not text:
                        raise ChatServiceError("Chat API returned empty content.")
                    return text
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    delay_s = _retry_delay(e.response, attempt)
                    # Total backoff stays within the request timeout budget
                    if attempt < _RATE_LIMIT_RETRIES and slept_s + delay_s <= self.timeout:
                        slept_s += delay_s
                        await asyncio.sleep(delay_s)
                        continue
                    raise ChatRateLimitError(
                        "Chat API rate limited the request. Please retry later."
                    ) from e
                raise ChatServiceError(
                    f"Chat API returned {e.response.status_code}. Please try again later."
                ) from e
            except httpx.RequestError as e:
                raise ChatServiceError(
                    "Chat service unavailable (timeout or connection error). Please try again later."
                ) from e
            except (KeyError, TypeError, IndexError, ValueError, AttributeError) as e:
                raise ChatServiceError("Chat API returned unexpected response format.") from e
        raise ChatServiceError("Chat API request failed.")


# Default model for OpenAI official API when CHAT_MODEL is not set
_OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
# Default model for OpenAI-compatible (vLLM, etc.) when CHAT_MODEL is not set
_OPENAI_COMPATIBLE_DEFAULT_MODEL = "Qwen/Qwen2.5-7B-Instruct"
# Default model for Gemini when CHAT_MODEL is not set
_GEMINI_DEFAULT_MODEL = "gemini-1.5-flash"


def get_chat_provider(settings: Settings | None = None) -> ChatProvider:
    s = settings or get_settings()
    provider = (s.chat_provider or "").lower()
    if provider == "gemini":
        api_key = s.chat_api_key or s.gemini_api_key
        if api_key:
            return GeminiChatProvider(
                api_key=api_key,
                model=s.chat_model or _GEMINI_DEFAULT_MODEL,
                base_url=s.chat_api_base_url or GEMINI_API_BASE_URL,
                timeout=s.chat_timeout_seconds,
            )
    elif provider == "openai":
        if s.openai_api_key and not s.chat_api_base_url:
            return OpenAIChatProvider(s)
        if s.chat_api_base_url:
            return OpenAICompatibleChatProvider(
                base_url=s.chat_api_base_url,
                api_key=s.chat_api_key,
                model=s.chat_model or _OPENAI_COMPATIBLE_DEFAULT_MODEL,
                timeout=s.chat_timeout_seconds,
            )
    raise RuntimeError(
        "Chat LLM not configured. Set CHAT_PROVIDER and GEMINI_API_KEY "
        "(or OPENAI_API_KEY / CHAT_API_BASE_URL and CHAT_MODEL)."
    )
