"""Core configuration, logging, and shared infrastructure."""

from talentmatch.core.config import Settings, get_settings
from talentmatch.core.constants import (
    EMBEDDING_DIM,
    FALLBACK_ANALYSIS_MESSAGE,
    GITHUB_PROFILE_URL,
)
from talentmatch.core.limiter import limiter
from talentmatch.core.logging import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "EMBEDDING_DIM",
    "FALLBACK_ANALYSIS_MESSAGE",
    "GITHUB_PROFILE_URL",
    "limiter",
    "configure_logging",
]
