"""Canonical text for candidate embeddings.

The field order and formatting here decide which vectors are comparable:
changing them means re-embedding the whole corpus.
"""

import json

from talentmatch.core import GITHUB_PROFILE_URL
from talentmatch.schemas import CandidateProfile, RawCandidateRecord


def _fmt_number(value: float | int | None) -> str:
    if value is None:
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_candidate_search_document(record: RawCandidateRecord) -> str:
    """Serialize a candidate into the fixed-order text that gets embedded."""
    languages = json.dumps(record.languages or {}, sort_keys=True, separators=(",", ":"))
    lines = [
        f"GitHub user {record.username}",
        f"Name: {record.name or ''}",
        f"Bio: {record.bio or ''}",
        f"Location: {record.location or ''}",
        f"Public repos: {_fmt_number(record.public_repos)}",
        f"Followers: {_fmt_number(record.followers)}",
        f"Experience: {_fmt_number(record.experience_years)} years",
        f"Skills: {', '.join(record.skills or [])}",
        f"Languages: {languages}",
    ]
    return "\n".join(lines)


def build_candidate_profile(record: RawCandidateRecord, embedding: list[float]) -> CandidateProfile:
    return CandidateProfile(
        username=record.username,
        name=record.name,
        bio=record.bio,
        location=record.location,
        experience_years=record.experience_years,
        popularity_score=record.popularity_score,
        languages=dict(record.languages or {}),
        skills=list(record.skills or []),
        public_repos=record.public_repos,
        total_stars=record.total_stars,
        followers=record.followers,
        github_url=record.github_url or GITHUB_PROFILE_URL.format(username=record.username),
        profile_data=dict(record.profile_data or {}),
        embedding=embedding,
    )
