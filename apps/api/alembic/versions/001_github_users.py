"""Initial schema: github_users with pgvector embedding and HNSW cosine index.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from pgvector.sqlalchemy import Vector

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Must match talentmatch.core.EMBEDDING_DIM and EMBED_DIMENSION
EMBEDDING_DIM = 768


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        "github_users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("insert_seq", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("experience_years", sa.Float(), nullable=True),
        sa.Column("popularity_score", sa.Float(), nullable=True),
        sa.Column("languages", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("skills", sa.ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("public_repos", sa.Integer(), nullable=True),
        sa.Column("total_stars", sa.Integer(), nullable=True),
        sa.Column("followers", sa.Integer(), nullable=True),
        sa.Column("github_url", sa.String(500), nullable=True),
        sa.Column("profile_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("embedding", Vector(EMBEDDING_DIM), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    # Unique username is what ON CONFLICT DO NOTHING relies on during concurrent imports
    op.create_index("ix_github_users_username", "github_users", ["username"], unique=True)
    op.create_index("ix_github_users_insert_seq", "github_users", ["insert_seq"], unique=True)

    # HNSW on embedding for cosine similarity (<=>)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_github_users_embedding_hnsw "
        "ON github_users USING hnsw (embedding vector_cosine_ops)"
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS ix_github_users_embedding_hnsw")
    op.drop_index("ix_github_users_insert_seq", table_name="github_users")
    op.drop_index("ix_github_users_username", table_name="github_users")
    op.drop_table("github_users")
