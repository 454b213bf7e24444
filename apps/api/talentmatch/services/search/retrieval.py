import logging
from typing import Any

from talentmatch.providers import EmbeddingProvider
from talentmatch.schemas import CandidateMatch
from talentmatch.services.candidates import CandidateStore, InvalidQueryError

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.7
DEFAULT_MATCH_COUNT = 10


def validate_query(query: Any) -> str:
    """Return the stripped query text or raise InvalidQueryError."""
    if not isinstance(query, str) or not query.strip():
        raise InvalidQueryError("Query string is required")
    return query.strip()


class CandidateRetriever:
    """Embed the query once, then ask the store for the closest candidates."""

    def __init__(
        self,
        store: CandidateStore,
        embedder: EmbeddingProvider,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
    ):
        self.store = store
        self.embedder = embedder
        self.threshold = threshold
        self.limit = limit

    async def retrieve(self, query: Any, filters: dict[str, Any] | None = None) -> list[CandidateMatch]:
        """
        Raises:
            InvalidQueryError: query is empty or not a string.
            EmbeddingServiceError: the query could not be embedded (no text-search fallback).
        """
        text = validate_query(query)
        if filters:
            # Pass-through extension point; threshold/limit stay process-wide.
            logger.info("Search filters received but not applied: %s", sorted(filters))

        query_vector = await self.embedder.embed_one(text)
        scored = await self.store.search_by_similarity(query_vector, self.threshold, self.limit)
        logger.info(
            "Retrieved %d candidates | threshold=%.2f limit=%d query=%s",
            len(scored),
            self.threshold,
            self.limit,
            text[:60],
        )
        return [CandidateMatch.from_profile(profile, score) for profile, score in scored]
