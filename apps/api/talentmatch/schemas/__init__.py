from .candidates import CandidateMatch, CandidateProfile, RawCandidateRecord
from .imports import ImportRequest, ImportResponse, IngestSummary
from .search import CandidateExplanation, EnhancedAnalysis, SearchRequest, SearchResponse

__all__ = [
    "CandidateMatch",
    "CandidateProfile",
    "RawCandidateRecord",
    "ImportRequest",
    "ImportResponse",
    "IngestSummary",
    "CandidateExplanation",
    "EnhancedAnalysis",
    "SearchRequest",
    "SearchResponse",
]
