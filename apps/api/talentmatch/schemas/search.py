from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .candidates import CandidateMatch


class SearchRequest(BaseModel):
    # query is validated by the retriever so a missing query maps to 400, not 422
    query: Any = None
    filters: Optional[dict[str, Any]] = None


class CandidateExplanation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    match_reason: str = Field("", alias="matchReason")
    strengths: list[str] = []
    potential_concerns: list[str] = []


class EnhancedAnalysis(BaseModel):
    """Overall match summary plus explanations for the top candidates."""
    model_config = ConfigDict(populate_by_name=True)

    analysis: str
    top_candidates: list[CandidateExplanation] = Field(default_factory=list, alias="topCandidates")


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    candidates: list[CandidateMatch] = []
    enhanced_results: Optional[EnhancedAnalysis] = Field(None, alias="enhancedResults")
