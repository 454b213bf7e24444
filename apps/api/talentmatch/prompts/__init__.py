from .candidate_analysis import get_candidate_analysis_prompt

__all__ = ["get_candidate_analysis_prompt"]
