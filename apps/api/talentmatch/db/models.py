import uuid

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    Identity,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID

from pgvector.sqlalchemy import Vector

from talentmatch.core import EMBEDDING_DIM

from .session import Base


def uuid4_str():
    return str(uuid.uuid4())


class GithubUser(Base):
    """One searchable candidate. Written once by ingestion, read-only during search."""
    __tablename__ = "github_users"

    id = Column(UUID(as_uuid=False), primary_key=True, default=uuid4_str)
    username = Column(String(255), nullable=False)  # natural key for dedupe
    # Insertion order; breaks similarity ties deterministically
    insert_seq = Column(BigInteger, Identity(always=True), nullable=False)

    name = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    experience_years = Column(Float, nullable=True)
    popularity_score = Column(Float, nullable=True)

    languages = Column(JSONB, nullable=True)  # {"Python": 0.7, "Go": 0.3}
    skills = Column(ARRAY(String), default=list, nullable=False)

    public_repos = Column(Integer, nullable=True)
    total_stars = Column(Integer, nullable=True)
    followers = Column(Integer, nullable=True)
    github_url = Column(String(500), nullable=True)

    profile_data = Column(JSONB, nullable=True)  # raw source payload, kept verbatim
    embedding = Column(Vector(EMBEDDING_DIM), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_github_users_username", "username", unique=True),
        Index("ix_github_users_insert_seq", "insert_seq", unique=True),
    )
