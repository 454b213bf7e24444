"""Generative re-ranking/explanation of retrieved candidates.

The model output is untrusted: parse_enhanced_analysis never raises and
returns a tagged result so callers can tell a real analysis from the fallback.
A chat provider failure (model unreachable) is different and propagates.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from talentmatch.core import FALLBACK_ANALYSIS_MESSAGE
from talentmatch.prompts import get_candidate_analysis_prompt
from talentmatch.providers import ChatProvider
from talentmatch.schemas import CandidateExplanation, CandidateMatch, EnhancedAnalysis
from talentmatch.utils import strip_json_from_response

logger = logging.getLogger(__name__)

DEFAULT_TOP_CANDIDATES = 3
BIO_MAX_LEN = 300


@dataclass(frozen=True)
class AnalysisParseResult:
    analysis: EnhancedAnalysis
    fallback: bool = False


def fallback_analysis() -> EnhancedAnalysis:
    return EnhancedAnalysis(analysis=FALLBACK_ANALYSIS_MESSAGE, top_candidates=[])


def compact_candidate(match: CandidateMatch) -> dict[str, Any]:
    """Prompt-sized view of a candidate (no embedding, no raw profile blob)."""
    bio = match.bio or ""
    if len(bio) > BIO_MAX_LEN:
        bio = bio[:BIO_MAX_LEN].rsplit(maxsplit=1)[0]
    return {
        "username": match.username,
        "name": match.name,
        "bio": bio or None,
        "location": match.location,
        "experience_years": match.experience_years,
        "skills": match.skills,
        "languages": match.languages,
        "public_repos": match.public_repos,
        "total_stars": match.total_stars,
        "followers": match.followers,
        "popularity_score": match.popularity_score,
        "similarity": round(match.similarity, 4),
    }


def parse_enhanced_analysis(
    raw: str | None,
    allowed_usernames: list[str] | None = None,
    top_n: int = DEFAULT_TOP_CANDIDATES,
) -> AnalysisParseResult:
    """Parse model text into EnhancedAnalysis, or return the fallback.

    Entries that fail validation, repeat a username, or name someone outside
    ``allowed_usernames`` are dropped; the list is cut to ``top_n``.
    """
    try:
        data = json.loads(strip_json_from_response(raw or ""))
    except (TypeError, ValueError) as e:
        logger.warning(
            "Candidate analysis: JSON parse FAILED, using fallback | error=%s raw_preview=%s",
            e,
            (raw or "")[:100],
        )
        return AnalysisParseResult(fallback_analysis(), fallback=True)

    if not isinstance(data, dict):
        logger.warning("Candidate analysis: expected JSON object, got %s", type(data).__name__)
        return AnalysisParseResult(fallback_analysis(), fallback=True)
    analysis_text = data.get("analysis")
    items = data.get("topCandidates") or []
    if not isinstance(analysis_text, str) or not analysis_text.strip() or not isinstance(items, list):
        logger.warning("Candidate analysis: unexpected structure, keys=%s", sorted(data))
        return AnalysisParseResult(fallback_analysis(), fallback=True)

    canonical = {u.lower(): u for u in (allowed_usernames or [])}
    seen: set[str] = set()
    explanations: list[CandidateExplanation] = []
    for item in items:
        try:
            explanation = CandidateExplanation.model_validate(item)
        except ValidationError:
            logger.info("Candidate analysis: dropping malformed entry %s", str(item)[:100])
            continue
        key = explanation.username.strip().lower()
        if allowed_usernames is not None:
            if key not in canonical:
                logger.info("Candidate analysis: dropping unknown username %s", explanation.username)
                continue
            explanation.username = canonical[key]
        if key in seen:
            continue
        seen.add(key)
        explanations.append(explanation)
        if len(explanations) >= top_n:
            break

    return AnalysisParseResult(
        EnhancedAnalysis(analysis=analysis_text.strip(), top_candidates=explanations)
    )


class CandidateExplainer:
    def __init__(self, chat: ChatProvider, top_n: int = DEFAULT_TOP_CANDIDATES):
        self.chat = chat
        self.top_n = top_n

    async def explain(self, query: str, candidates: list[CandidateMatch]) -> EnhancedAnalysis | None:
        """
        Returns None when there is nothing to explain.

        Raises:
            ChatServiceError: the model could not be reached (malformed output does not raise).
        """
        if not candidates:
            return None
        prompt = get_candidate_analysis_prompt(
            query,
            [compact_candidate(c) for c in candidates],
            top_n=self.top_n,
        )
        logger.info(
            "Candidate analysis: LLM call start | candidates=%d payload_chars=%d",
            len(candidates),
            len(prompt),
        )
        raw = await self.chat.chat(prompt, max_tokens=1500, temperature=0.2, json_output=True)
        result = parse_enhanced_analysis(
            raw,
            allowed_usernames=[c.username for c in candidates],
            top_n=self.top_n,
        )
        logger.info(
            "Candidate analysis: complete | fallback=%s top=%d",
            result.fallback,
            len(result.analysis.top_candidates),
        )
        return result.analysis
