"""Candidate store, canonical text, and ingestion pipeline."""

from .errors import DuplicateHandleError, InvalidEmbeddingError, InvalidQueryError
from .ingestion import CandidateIngestionService, IngestOutcome
from .search_document import build_candidate_profile, build_candidate_search_document
from .store import CandidateStore, InMemoryCandidateStore, PgCandidateStore, cosine_similarity

__all__ = [
    "DuplicateHandleError",
    "InvalidEmbeddingError",
    "InvalidQueryError",
    "CandidateIngestionService",
    "IngestOutcome",
    "build_candidate_profile",
    "build_candidate_search_document",
    "CandidateStore",
    "InMemoryCandidateStore",
    "PgCandidateStore",
    "cosine_similarity",
]
