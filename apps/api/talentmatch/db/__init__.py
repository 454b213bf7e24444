from .session import Base, async_database_url, get_engine, get_session_factory
from . import models  # noqa: F401

__all__ = ["Base", "async_database_url", "get_engine", "get_session_factory", "models"]
