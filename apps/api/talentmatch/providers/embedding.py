from abc import ABC, abstractmethod

import httpx

from talentmatch.core import Settings, get_settings

GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class EmbeddingServiceError(Exception):
    """Raised when the embedding API is unavailable or returns an error (e.g. 522 timeout)."""


class EmbeddingDimensionError(EmbeddingServiceError):
    """Raised when the embedding model returns a vector of the wrong size for the store."""


class EmbeddingProvider(ABC):
    @property
    @abstractmethod
    def dimension(self) -> int:
        pass

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        pass

    async def embed_one(self, text: str) -> list[float]:
        """Embed a single text and check it against the configured dimension.

        Never returns an empty or zero-filled vector; any problem raises
        EmbeddingServiceError so callers cannot rank on a garbage vector.
        """
        vectors = await self.embed([text])
        if not vectors or not vectors[0]:
            raise EmbeddingServiceError("Embedding API returned no vector.")
        vec = [float(x) for x in vectors[0]]
        if len(vec) != self.dimension:
            raise EmbeddingDimensionError(
                f"Embedding model returned {len(vec)} dimensions, expected {self.dimension}."
            )
        return vec


class OpenAICompatibleEmbeddingProvider(EmbeddingProvider):
    """OpenAI-compatible /embeddings endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        model: str,
        dimension: int,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        if not self.base_url.endswith("/v1"):
            self.base_url = f"{self.base_url}/v1"
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(
                    f"{self.base_url}/embeddings",
                    json={"model": self.model, "input": texts},
                    headers=headers,
                )
                r.raise_for_status()
                data = r.json()
                try:
                    return [item["embedding"] for item in sorted(data["data"], key=lambda x: x["index"])]
                except (KeyError, TypeError) as e:
                    raise EmbeddingServiceError(
                        "Embedding API returned unexpected response format."
                    ) from e
        except httpx.HTTPStatusError as e:
            raise EmbeddingServiceError(
                f"Embedding API returned {e.response.status_code}. Please try again later."
            ) from e
        except httpx.RequestError as e:
            raise EmbeddingServiceError(
                "Embedding service unavailable (timeout or connection error). Please try again later."
            ) from e
        except ValueError as e:
            raise EmbeddingServiceError("Embedding API returned invalid JSON.") from e


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Google Generative Language API (batchEmbedContents)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        dimension: int,
        base_url: str = GEMINI_API_BASE_URL,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model if model.startswith("models/") else f"models/{model}"
        self.timeout = timeout
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        payload = {
            "requests": [
                {"model": self.model, "content": {"parts": [{"text": t}]}}
                for t in texts
            ]
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(
                    f"{self.base_url}/{self.model}:batchEmbedContents",
                    json=payload,
                    headers=headers,
                )
                r.raise_for_status()
                data = r.json()
                try:
                    out = [item["values"] for item in data["embeddings"]]
                except (KeyError, TypeError) as e:
                    raise EmbeddingServiceError(
                        "Embedding API returned unexpected response format."
                    ) from e
                if len(out) != len(texts):
                    raise EmbeddingServiceError(
                        f"Embedding API returned {len(out)} vectors but expected {len(texts)}."
                    )
                return out
        except httpx.HTTPStatusError as e:
            raise EmbeddingServiceError(
                f"Embedding API returned {e.response.status_code}. Please try again later."
            ) from e
        except httpx.RequestError as e:
            raise EmbeddingServiceError(
                "Embedding service unavailable (timeout or connection error). Please try again later."
            ) from e
        except ValueError as e:
            raise EmbeddingServiceError("Embedding API returned invalid JSON.") from e


def get_embedding_provider(settings: Settings | None = None) -> EmbeddingProvider:
    s = settings or get_settings()
    provider = (s.embed_provider or "").lower()
    if provider == "gemini":
        api_key = s.embed_api_key or s.gemini_api_key
        if api_key:
            return GeminiEmbeddingProvider(
                api_key=api_key,
                model=s.embed_model,
                dimension=s.embed_dimension,
                base_url=s.embed_api_base_url or GEMINI_API_BASE_URL,
                timeout=s.embed_timeout_seconds,
            )
    elif provider == "openai":
        base_url = s.embed_api_base_url or ("https://api.openai.com/v1" if s.openai_api_key else None)
        if base_url:
            return OpenAICompatibleEmbeddingProvider(
                base_url=base_url,
                api_key=s.embed_api_key or s.openai_api_key,
                model=s.embed_model,
                dimension=s.embed_dimension,
                timeout=s.embed_timeout_seconds,
            )
    raise RuntimeError(
        "Embedding model not configured. Set EMBED_PROVIDER and GEMINI_API_KEY "
        "(or EMBED_API_BASE_URL / EMBED_MODEL for an OpenAI-compatible endpoint)."
    )
