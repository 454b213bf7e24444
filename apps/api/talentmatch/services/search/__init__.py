"""Candidate retrieval, explanation, and the search orchestrator."""

from .explain import (
    AnalysisParseResult,
    CandidateExplainer,
    compact_candidate,
    fallback_analysis,
    parse_enhanced_analysis,
)
from .retrieval import CandidateRetriever, validate_query
from .search import CandidateSearchService, SearchOutcome

__all__ = [
    "AnalysisParseResult",
    "CandidateExplainer",
    "compact_candidate",
    "fallback_analysis",
    "parse_enhanced_analysis",
    "CandidateRetriever",
    "validate_query",
    "CandidateSearchService",
    "SearchOutcome",
]
