import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException

from talentmatch.core import Settings, get_settings
from talentmatch.providers import ChatProvider, EmbeddingProvider, get_chat_provider, get_embedding_provider
from talentmatch.services.candidates import (
    CandidateIngestionService,
    CandidateStore,
    InMemoryCandidateStore,
    PgCandidateStore,
)
from talentmatch.services.search import CandidateExplainer, CandidateRetriever, CandidateSearchService

logger = logging.getLogger(__name__)


@lru_cache
def _build_candidate_store() -> CandidateStore:
    s = get_settings()
    backend = (s.candidate_store or "").lower()
    if backend == "memory":
        logger.warning("Using in-memory candidate store; data is lost on restart")
        return InMemoryCandidateStore(dimension=s.embed_dimension)
    if backend == "postgres":
        from talentmatch.db import get_session_factory

        return PgCandidateStore(get_session_factory(), dimension=s.embed_dimension)
    raise RuntimeError(f"Unknown CANDIDATE_STORE {s.candidate_store!r}; use 'postgres' or 'memory'.")


def get_candidate_store() -> CandidateStore:
    # Misconfiguration is reported as a regular HTTP 500 response
    try:
        return _build_candidate_store()
    except RuntimeError as e:
        logger.error("Candidate store unavailable: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e


def get_embedder(settings: Annotated[Settings, Depends(get_settings)]) -> EmbeddingProvider:
    try:
        return get_embedding_provider(settings)
    except RuntimeError as e:
        logger.error("Embedding provider unavailable: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e


def get_chat(settings: Annotated[Settings, Depends(get_settings)]) -> ChatProvider | None:
    """Chat is optional: without it search still returns the similarity ranking."""
    try:
        return get_chat_provider(settings)
    except RuntimeError as e:
        logger.warning("Candidate analysis disabled: %s", e)
        return None


def get_search_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[CandidateStore, Depends(get_candidate_store)],
    embedder: Annotated[EmbeddingProvider, Depends(get_embedder)],
    chat: Annotated[ChatProvider | None, Depends(get_chat)],
) -> CandidateSearchService:
    retriever = CandidateRetriever(
        store,
        embedder,
        threshold=settings.match_threshold,
        limit=settings.match_count,
    )
    explainer = CandidateExplainer(chat, top_n=settings.top_candidates) if chat else None
    return CandidateSearchService(retriever, explainer)


def get_ingestion_service(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[CandidateStore, Depends(get_candidate_store)],
    embedder: Annotated[EmbeddingProvider, Depends(get_embedder)],
) -> CandidateIngestionService:
    return CandidateIngestionService(store, embedder, batch_size=settings.ingest_batch_size)
