"""Domain errors for candidate storage, ingestion and retrieval."""


class InvalidQueryError(ValueError):
    """Search query is missing, empty, or not text."""


class InvalidEmbeddingError(ValueError):
    """Profile embedding is missing or does not match the store's vector dimension."""


class DuplicateHandleError(Exception):
    """A candidate with this username already exists in the store."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Candidate {username!r} already exists")
