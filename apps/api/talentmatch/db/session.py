from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from talentmatch.core import get_settings

Base = declarative_base()


def async_database_url(database_url: str) -> str:
    """Support both postgres:// and postgresql+asyncpg:// (Render, Supabase, local)."""
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://") and "asyncpg" not in database_url:
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


@lru_cache
def get_engine() -> AsyncEngine:
    s = get_settings()
    database_url = async_database_url(s.database_url)
    return create_async_engine(
        database_url,
        echo=s.sql_echo,
        poolclass=NullPool if "render.com" in database_url else None,
        connect_args={
            "server_settings": {"statement_timeout": str(s.db_statement_timeout_ms)},
        },
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
