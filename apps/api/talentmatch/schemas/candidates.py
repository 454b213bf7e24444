from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawCandidateRecord(BaseModel):
    """One externally supplied user record as posted to /import-github-users.

    Only ``username`` is required; everything else is best-effort and unknown
    keys are ignored.
    """
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    username: str = Field(..., min_length=1)
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    public_repos: Optional[int] = None
    total_stars: Optional[int] = None
    followers: Optional[int] = None
    experience_years: Optional[float] = None
    popularity_score: Optional[float] = None
    skills: list[str] = []
    languages: dict[str, float] = {}
    github_url: Optional[str] = None
    profile_data: dict[str, Any] = {}

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_list(cls, v: Any) -> list:
        if not isinstance(v, (list, tuple)):
            return []
        return [str(s).strip() for s in v if s is not None and str(s).strip()]

    @field_validator("languages", "profile_data", mode="before")
    @classmethod
    def _mapping_or_empty(cls, v: Any) -> dict:
        return v if isinstance(v, dict) else {}


class CandidateProfile(BaseModel):
    """A stored candidate. ``embedding`` is only populated on the write path."""

    id: Optional[str] = None
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[float] = None
    popularity_score: Optional[float] = None
    languages: dict[str, float] = {}
    skills: list[str] = []
    public_repos: Optional[int] = None
    total_stars: Optional[int] = None
    followers: Optional[int] = None
    github_url: Optional[str] = None
    profile_data: dict[str, Any] = {}
    embedding: Optional[list[float]] = Field(default=None, repr=False)


class CandidateMatch(BaseModel):
    """Candidate as returned from a search, with its cosine similarity to the query."""

    id: Optional[str] = None
    username: str
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[float] = None
    popularity_score: Optional[float] = None
    languages: dict[str, float] = {}
    skills: list[str] = []
    public_repos: Optional[int] = None
    total_stars: Optional[int] = None
    followers: Optional[int] = None
    github_url: Optional[str] = None
    profile_data: dict[str, Any] = {}
    similarity: float

    @classmethod
    def from_profile(cls, profile: CandidateProfile, similarity: float) -> "CandidateMatch":
        return cls(**profile.model_dump(exclude={"embedding"}), similarity=similarity)
