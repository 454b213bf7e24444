"""Prompt for the recruiter-assistant analysis of retrieved candidates.

Output is strict JSON: an overall analysis plus the top N candidates with
match reason, strengths and concerns.
"""

import json
from typing import Any


def get_candidate_analysis_prompt(
    query: str,
    candidates: list[dict[str, Any]],
    top_n: int = 3,
) -> str:
    """Build the analysis prompt. ``candidates`` should already be compact
    (no embeddings or raw profile blobs) to keep token cost bounded."""
    candidates_json = json.dumps(candidates or [], ensure_ascii=True, indent=2)
    return f"""You are an expert recruiter assistant helping to match candidates to job requirements.

Search query: "{query}"

Candidate profiles (already ranked by semantic similarity, best first):
{candidates_json}

TASK
Provide a brief analysis of the top {top_n} candidates that best match the query.

RULES
1) Only pick candidates from the list above; use their exact "username".
2) Use only facts present in the profiles. Do not invent skills or experience.
3) Return at most {top_n} entries in "topCandidates", best match first.
4) Keep "matchReason" to one or two sentences; strengths and concerns are short phrases.

OUTPUT (STRICT)
Return ONLY valid JSON (no markdown, no code fence) with this structure:
{{
  "analysis": "Your overall analysis of the match quality",
  "topCandidates": [
    {{
      "username": "candidate username",
      "matchReason": "Specific reason why this candidate is a good match",
      "strengths": ["strength1", "strength2"],
      "potential_concerns": ["concern1", "concern2"]
    }}
  ]
}}
"""
