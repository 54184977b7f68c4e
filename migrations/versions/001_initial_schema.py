"""Initial database schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # Create exhibits table
    op.create_table(
        "exhibits",
        sa.Column("exhibit_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("facets", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("contact_emails", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("published", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_exhibits_slug"),
    )

    # Create exhibit_configurations table (one per exhibit)
    op.create_table(
        "exhibit_configurations",
        sa.Column("configuration_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("exhibit_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("default_per_page", sa.Integer, nullable=False, server_default="10"),
        sa.Column("default_sort", sa.String(100), nullable=True),
        sa.Column("default_view", sa.String(50), nullable=False, server_default="list"),
        sa.Column("settings", postgresql.JSONB, nullable=False, server_default="{}"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["exhibit_id"], ["exhibits.exhibit_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("exhibit_id", name="uq_exhibit_configurations_exhibit"),
    )

    # Create saved_searches table
    op.create_table(
        "saved_searches",
        sa.Column("search_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("exhibit_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("short_description", sa.String(255), nullable=True),
        sa.Column("long_description", sa.Text, nullable=True),
        sa.Column("featured_image", sa.String(2048), nullable=True),
        sa.Column("query_params", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("weight", sa.Integer, nullable=False, server_default="0"),
        sa.Column("on_landing_page", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("published", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("lock_version", sa.Integer, nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["exhibit_id"], ["exhibits.exhibit_id"], ondelete="CASCADE"),
    )
    op.create_index(
        "idx_saved_search_exhibit_order",
        "saved_searches",
        ["exhibit_id", "weight", "search_id"],
    )

    # Create pages table
    op.create_table(
        "pages",
        sa.Column("page_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("exhibit_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("page_type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("published", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("weight", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["exhibit_id"], ["exhibits.exhibit_id"], ondelete="CASCADE"),
    )
    op.create_index("ix_pages_exhibit_id", "pages", ["exhibit_id"])
    op.create_index("idx_page_exhibit_type", "pages", ["exhibit_id", "page_type", "weight"])


def downgrade() -> None:
    op.drop_index("idx_page_exhibit_type", table_name="pages")
    op.drop_index("ix_pages_exhibit_id", table_name="pages")
    op.drop_table("pages")
    op.drop_index("idx_saved_search_exhibit_order", table_name="saved_searches")
    op.drop_table("saved_searches")
    op.drop_table("exhibit_configurations")
    op.drop_table("exhibits")
