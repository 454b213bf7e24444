"""Shared API constants."""

# Vector size used by the github_users.embedding column (match migration 001)
EMBEDDING_DIM = 768

# Default fallback for GitHub profile URLs when a record does not carry one
GITHUB_PROFILE_URL = "https://github.com/{username}"

# Returned as enhancedResults when the model output cannot be parsed
FALLBACK_ANALYSIS_MESSAGE = "Unable to generate analysis"
