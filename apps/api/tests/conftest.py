"""Shared fixtures: deterministic fake providers and an in-memory store."""

import os
import re

# Settings are cached on first import; configure before importing the app.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("CANDIDATE_STORE", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from talentmatch.dependencies import get_candidate_store, get_chat, get_embedder
from talentmatch.main import app
from talentmatch.providers import ChatProvider, ChatServiceError, EmbeddingProvider, EmbeddingServiceError
from talentmatch.services.candidates import InMemoryCandidateStore


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

# Axis 0 is a shared "developer profile" bias so unrelated profiles still score
# moderately; the remaining axes count technology keywords.
VOCABULARY = ["python", "django", "go", "rust", "react", "javascript", "java"]
BIAS = 2.0
FAKE_DIMENSION = 1 + len(VOCABULARY)


def keyword_vector(text: str) -> list[float]:
    tokens = re.findall(r"[a-z]+", text.lower())
    vec = [BIAS] + [0.0] * len(VOCABULARY)
    for token in tokens:
        if token in VOCABULARY:
            vec[1 + VOCABULARY.index(token)] += 1.0
    return vec


class FakeEmbeddingProvider(EmbeddingProvider):
    """Keyword-count embeddings; fails for texts containing any ``fail_on`` marker."""

    def __init__(self, dimension: int = FAKE_DIMENSION, fail_on: tuple[str, ...] = ()):
        self._dimension = dimension
        self.fail_on = fail_on
        self.calls: list[str] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, texts: list[str]) -> list[list[float]]:
        out = []
        for text in texts:
            self.calls.append(text)
            if any(marker in text for marker in self.fail_on):
                raise EmbeddingServiceError("Embedding service unavailable (forced).")
            out.append(keyword_vector(text))
        return out


class FakeChatProvider(ChatProvider):
    def __init__(self, response: str | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def _chat(self, messages, max_tokens=2048, temperature=None, json_output=False) -> str:
        self.prompts.append(messages[-1]["content"])
        if self.error is not None:
            raise self.error
        return self.response or ""


def make_user(username: str, **fields) -> dict:
    return {"username": username, **fields}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return InMemoryCandidateStore(dimension=FAKE_DIMENSION)


@pytest.fixture
def embedder():
    return FakeEmbeddingProvider()


@pytest.fixture
def chat():
    return FakeChatProvider(
        response='{"analysis": "Strong Python pool.", "topCandidates": []}'
    )


@pytest.fixture
def unreachable_chat():
    return FakeChatProvider(error=ChatServiceError("Chat service unavailable (forced)."))


@pytest.fixture
def client(store, embedder, chat):
    app.dependency_overrides[get_candidate_store] = lambda: store
    app.dependency_overrides[get_embedder] = lambda: embedder
    app.dependency_overrides[get_chat] = lambda: chat
    yield TestClient(app)
    app.dependency_overrides.clear()
