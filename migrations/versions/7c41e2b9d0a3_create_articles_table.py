"""create articles table

Revision ID: 7c41e2b9d0a3
Revises:
Create Date: 2026-10-19 09:12:40.215533
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "7c41e2b9d0a3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("subtitle", sa.String(length=300), nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("raw_markup", sa.Text(), nullable=False),
        sa.Column("rendered_markup", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        # SEO / social
        sa.Column("lang", sa.String(length=20), nullable=True),
        sa.Column("seo_title", sa.String(length=300), nullable=True),
        sa.Column("seo_description", sa.Text(), nullable=True),
        sa.Column("canonical_url", sa.String(length=1024), nullable=True),
        sa.Column("robots_index", sa.String(length=20), nullable=True),
        sa.Column("robots_follow", sa.String(length=20), nullable=True),
        sa.Column("og_image", sa.String(length=1024), nullable=True),
        sa.Column("og_title", sa.String(length=300), nullable=True),
        sa.Column("og_description", sa.Text(), nullable=True),
        sa.Column("twitter_card", sa.String(length=40), nullable=True),
        sa.Column("twitter_site", sa.String(length=120), nullable=True),
        sa.Column("twitter_creator", sa.String(length=120), nullable=True),
        # Cover
        sa.Column("cover_image", sa.String(length=1024), nullable=True),
        sa.Column("cover_blurhash", sa.String(length=120), nullable=True),
        sa.Column("cover_dominant_color", sa.String(length=20), nullable=True),
        # Editorial
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("reading_time", sa.Integer(), nullable=True),
        sa.Column("word_count", sa.Integer(), nullable=True),
        sa.Column("reviewed_by", sa.String(length=200), nullable=True),
        sa.Column("reviewer_credentials", sa.String(length=300), nullable=True),
        sa.Column("fact_checked", sa.Boolean(), nullable=True),
        sa.Column("related_articles", sa.JSON(), nullable=True),
        sa.Column("tldr", sa.Text(), nullable=True),
        sa.Column("key_takeaways", sa.JSON(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("slug", name="articles_slug_key"),
    )
    op.create_index("ix_articles_id", "articles", ["id"], unique=False)
    op.create_index("ix_articles_status", "articles", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_articles_status", table_name="articles")
    op.drop_index("ix_articles_id", table_name="articles")
    op.drop_table("articles")
