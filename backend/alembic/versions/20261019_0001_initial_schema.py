"""initial newsroom schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "pz_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="author"),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_pz_users_id", "pz_users", ["id"])
    op.create_index("ix_pz_users_email", "pz_users", ["email"], unique=True)

    op.create_table(
        "pz_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("name_bg", sa.String(255), nullable=False),
        sa.Column("name_en", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("pz_categories.id"), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_pz_categories_id", "pz_categories", ["id"])
    op.create_index("ix_pz_categories_slug", "pz_categories", ["slug"], unique=True)
    op.create_index("ix_pz_categories_parent_id", "pz_categories", ["parent_id"])

    op.create_table(
        "pz_media",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("storage_key", sa.String(500), nullable=False, unique=True),
        sa.Column("bucket", sa.String(255), nullable=False),
        sa.Column("public_url", sa.String(1000), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("alt_text", sa.String(255), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("pz_users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_pz_media_id", "pz_media", ["id"])
    op.create_index("ix_pz_media_uploaded_by", "pz_media", ["uploaded_by"])

    op.create_table(
        "pz_articles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("subtitle", sa.String(500), nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_breaking", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("pz_categories.id"), nullable=True),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("pz_users.id"), nullable=True),
        sa.Column(
            "featured_image_id", sa.Integer(),
            sa.ForeignKey("pz_media.id", ondelete="RESTRICT"), nullable=True,
        ),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("meta_title", sa.String(255), nullable=True),
        sa.Column("meta_description", sa.String(500), nullable=True),
        sa.Column("meta_keywords", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_pz_articles_id", "pz_articles", ["id"])
    op.create_index("ix_pz_articles_slug", "pz_articles", ["slug"], unique=True)
    op.create_index("ix_pz_articles_status", "pz_articles", ["status"])
    op.create_index("ix_pz_articles_category_id", "pz_articles", ["category_id"])
    op.create_index("ix_pz_articles_author_id", "pz_articles", ["author_id"])
    op.create_index("ix_pz_articles_featured_image_id", "pz_articles", ["featured_image_id"])

    op.create_table(
        "pz_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_pz_tags_id", "pz_tags", ["id"])
    op.create_index("ix_pz_tags_slug", "pz_tags", ["slug"], unique=True)

    op.create_table(
        "pz_article_tags",
        sa.Column("article_id", sa.Integer(), sa.ForeignKey("pz_articles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag_id", sa.Integer(), sa.ForeignKey("pz_tags.id", ondelete="CASCADE"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("pz_article_tags")
    op.drop_table("pz_tags")
    op.drop_table("pz_articles")
    op.drop_table("pz_media")
    op.drop_table("pz_categories")
    op.drop_table("pz_users")
