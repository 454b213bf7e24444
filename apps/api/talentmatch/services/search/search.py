"""Search orchestration: retrieval first, then best-effort explanation.

Retrieval errors fail the request. Explanation errors never do: the
similarity-ranked candidates are returned as-is with enhanced_results=None.
"""

import logging
from dataclasses import dataclass
from typing import Any

from talentmatch.schemas import CandidateMatch, EnhancedAnalysis

from .explain import CandidateExplainer
from .retrieval import CandidateRetriever, validate_query

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    candidates: list[CandidateMatch]
    enhanced_results: EnhancedAnalysis | None = None


class CandidateSearchService:
    def __init__(self, retriever: CandidateRetriever, explainer: CandidateExplainer | None):
        self.retriever = retriever
        self.explainer = explainer

    async def search(self, query: Any, filters: dict[str, Any] | None = None) -> SearchOutcome:
        text = validate_query(query)
        candidates = await self.retriever.retrieve(text, filters=filters)
        if not candidates or self.explainer is None:
            return SearchOutcome(candidates=candidates)

        try:
            enhanced = await self.explainer.explain(text, candidates)
        except Exception as e:
            logger.warning(
                "Candidate analysis skipped, returning similarity ranking only | candidates=%d error=%s",
                len(candidates),
                e,
            )
            enhanced = None
        return SearchOutcome(candidates=candidates, enhanced_results=enhanced)
