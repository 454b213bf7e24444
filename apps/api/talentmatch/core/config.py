from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from apps/api so it works regardless of CWD
_env_file = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_env_file, extra="ignore")

    database_url: str = "postgresql://localhost/talentmatch"
    db_statement_timeout_ms: int = 10000
    sql_echo: bool = False

    # "postgres" (pgvector) or "memory" (process-local, for local runs)
    candidate_store: str = "postgres"

    # Embeddings: "gemini" or "openai" (OpenAI-compatible /embeddings)
    embed_provider: str = "gemini"
    embed_api_base_url: str | None = None
    embed_api_key: str | None = None
    embed_model: str = "embedding-001"
    embed_dimension: int = 768  # must match github_users.embedding (migration 001)
    embed_timeout_seconds: float = 30.0

    # Chat: "gemini" or "openai" (OpenAI-compatible /chat/completions); None => provider-specific default model
    chat_provider: str = "gemini"
    chat_api_base_url: str | None = None
    chat_api_key: str | None = None
    chat_model: str | None = None
    chat_timeout_seconds: float = 60.0

    gemini_api_key: str | None = None
    openai_api_key: str | None = None

    # Retrieval / explanation
    match_threshold: float = 0.7
    match_count: int = 10
    top_candidates: int = 3

    # Ingestion
    ingest_batch_size: int = 10

    # Rate limiting (per remote address; multi-instance needs Redis later)
    rate_limit_enabled: bool = True
    search_rate_limit: str = "30/minute"
    import_rate_limit: str = "10/minute"

    # CORS (comma-separated origins; * allows all)
    cors_origins: str = "*"

    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parsed CORS origins for middleware."""
        raw = self.cors_origins.strip()
        return ["*"] if not raw else [o.strip() for o in raw.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
