"""Candidate store: uniqueness-enforcing insert and cosine similarity search.

PgCandidateStore is the production store (pgvector). InMemoryCandidateStore
has the same semantics and backs local runs (CANDIDATE_STORE=memory) and tests.
"""

import asyncio
import logging
import math
import uuid
from abc import ABC, abstractmethod

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import defer

from talentmatch.core import EMBEDDING_DIM
from talentmatch.db.models import GithubUser
from talentmatch.schemas import CandidateProfile

from .errors import DuplicateHandleError, InvalidEmbeddingError

logger = logging.getLogger(__name__)

ScoredProfile = tuple[CandidateProfile, float]


class CandidateStore(ABC):
    @property
    @abstractmethod
    def dimension(self) -> int:
        pass

    @abstractmethod
    async def exists(self, username: str) -> bool:
        pass

    @abstractmethod
    async def insert(self, profile: CandidateProfile) -> str:
        """Insert a fully-formed profile and return its id.

        Raises:
            DuplicateHandleError: username already stored (the store is the uniqueness authority).
            InvalidEmbeddingError: embedding missing or of the wrong dimension.
        """

    @abstractmethod
    async def search_by_similarity(
        self,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[ScoredProfile]:
        """Profiles with cosine similarity >= threshold, best first, ties by insertion order."""

    @abstractmethod
    async def count(self) -> int:
        pass

    def _check_embedding(self, vec: list[float] | None, what: str) -> None:
        if not vec:
            raise InvalidEmbeddingError(f"{what} has no embedding")
        if len(vec) != self.dimension:
            raise InvalidEmbeddingError(
                f"{what} embedding has {len(vec)} dimensions, store expects {self.dimension}"
            )


def cosine_similarity(a: list[float], b: list[float]) -> float | None:
    """Cosine similarity of two equal-length vectors; None if either has zero norm."""
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return None
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


# ---------------------------------------------------------------------------
# Postgres + pgvector
# ---------------------------------------------------------------------------

def _row_to_profile(row: GithubUser) -> CandidateProfile:
    return CandidateProfile(
        id=str(row.id),
        username=row.username,
        name=row.name,
        bio=row.bio,
        location=row.location,
        experience_years=row.experience_years,
        popularity_score=row.popularity_score,
        languages=row.languages or {},
        skills=list(row.skills or []),
        public_repos=row.public_repos,
        total_stars=row.total_stars,
        followers=row.followers,
        github_url=row.github_url,
        profile_data=row.profile_data or {},
    )


class PgCandidateStore(CandidateStore):
    """github_users table. One short session per call; nothing held across provider calls."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dimension: int = EMBEDDING_DIM,
    ):
        self._session_factory = session_factory
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def exists(self, username: str) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                select(GithubUser.id).where(GithubUser.username == username).limit(1)
            )
            return result.scalar_one_or_none() is not None

    async def insert(self, profile: CandidateProfile) -> str:
        self._check_embedding(profile.embedding, profile.username)
        stmt = (
            pg_insert(GithubUser)
            .values(
                id=str(uuid.uuid4()),
                username=profile.username,
                name=profile.name,
                bio=profile.bio,
                location=profile.location,
                experience_years=profile.experience_years,
                popularity_score=profile.popularity_score,
                languages=profile.languages,
                skills=profile.skills,
                public_repos=profile.public_repos,
                total_stars=profile.total_stars,
                followers=profile.followers,
                github_url=profile.github_url,
                profile_data=profile.profile_data,
                embedding=profile.embedding,
            )
            # Overlapping imports race on exists()->insert(); the unique index decides.
            .on_conflict_do_nothing(index_elements=[GithubUser.username])
            .returning(GithubUser.id)
        )
        async with self._session_factory() as db:
            try:
                result = await db.execute(stmt)
                new_id = result.scalar_one_or_none()
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        if new_id is None:
            raise DuplicateHandleError(profile.username)
        return str(new_id)

    async def search_by_similarity(
        self,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[ScoredProfile]:
        self._check_embedding(query_vector, "Query")
        distance = GithubUser.embedding.cosine_distance(query_vector)
        similarity = (1 - distance).label("similarity")
        stmt = (
            select(GithubUser, similarity)
            .options(defer(GithubUser.embedding))
            .where(GithubUser.embedding.isnot(None))
            .where(func.vector_dims(GithubUser.embedding) == self._dimension)
            .where((1 - distance) >= threshold)
            .order_by(distance.asc(), GithubUser.insert_seq.asc())
            .limit(limit)
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = result.all()
        return [(_row_to_profile(row), float(score)) for row, score in rows]

    async def count(self) -> int:
        async with self._session_factory() as db:
            result = await db.execute(select(func.count()).select_from(GithubUser))
            return int(result.scalar_one())


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryCandidateStore(CandidateStore):
    """Process-local store; not shared across workers and lost on restart."""

    def __init__(self, dimension: int = EMBEDDING_DIM):
        self._dimension = dimension
        self._by_username: dict[str, CandidateProfile] = {}
        self._lock = asyncio.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    async def exists(self, username: str) -> bool:
        return username in self._by_username

    async def insert(self, profile: CandidateProfile) -> str:
        self._check_embedding(profile.embedding, profile.username)
        async with self._lock:
            if profile.username in self._by_username:
                raise DuplicateHandleError(profile.username)
            stored = profile.model_copy(update={"id": str(uuid.uuid4())}, deep=True)
            # dicts keep insertion order, which is the tie-break order
            self._by_username[profile.username] = stored
        return stored.id

    async def search_by_similarity(
        self,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[ScoredProfile]:
        self._check_embedding(query_vector, "Query")
        scored: list[tuple[float, int, CandidateProfile]] = []
        for seq, profile in enumerate(self._by_username.values()):
            vec = profile.embedding
            if not vec or len(vec) != self._dimension:
                continue
            score = cosine_similarity(query_vector, vec)
            if score is None or score < threshold:
                continue
            scored.append((score, seq, profile))
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [
            (profile.model_copy(update={"embedding": None}), score)
            for score, _, profile in scored[: max(limit, 0)]
        ]

    async def count(self) -> int:
        return len(self._by_username)
