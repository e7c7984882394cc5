"""create cities, pages and ai_generations tables

Revision ID: 1c2d9e4f7a10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "1c2d9e4f7a10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the city registry, page store and append-only generation cache."""
    op.create_table(
        "cities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("name_key", sa.String(length=50), nullable=False),
        sa.Column("theme", sa.String(length=30), nullable=False),
        sa.Column("vibe", sa.String(length=30), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name_key"),
    )

    op.create_table(
        "pages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("city_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("title_slug", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("content_mode", sa.String(length=20), nullable=False),
        sa.Column("content_tag", sa.String(length=20), nullable=False),
        sa.Column("ai_confidence_score", sa.Float(), nullable=True),
        sa.Column("original_prompt", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["city_id"], ["cities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("city_id", "title_slug", name="uq_city_page_title_slug"),
    )
    op.create_index(op.f("ix_pages_city_id"), "pages", ["city_id"], unique=False)

    op.create_table(
        "ai_generations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("city_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["city_id"], ["cities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ai_generations_city_id"), "ai_generations", ["city_id"], unique=False)
    op.create_index(
        "ix_ai_generations_lookup", "ai_generations", ["city_id", "kind", "expires_at"], unique=False
    )


def downgrade() -> None:
    """Drop generation cache, pages and cities."""
    op.drop_index("ix_ai_generations_lookup", table_name="ai_generations")
    op.drop_index(op.f("ix_ai_generations_city_id"), table_name="ai_generations")
    op.drop_table("ai_generations")
    op.drop_index(op.f("ix_pages_city_id"), table_name="pages")
    op.drop_table("pages")
    op.drop_table("cities")
