"""init schema

Revision ID: 0001_init_schema
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001_init_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("login", sa.String(length=128), nullable=False),
        sa.Column("password_hash", sa.String(length=512), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admins_login", "admins", ["login"], unique=True)

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stores_code", "stores", ["code"], unique=True)

    op.create_table(
        "html_block_store_settings",
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("store_id"),
    )

    op.create_table(
        "html_blocks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=True),
        sa.Column("code", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_html_blocks_store_id", "html_blocks", ["store_id"], unique=False)
    op.create_index("ix_html_blocks_code", "html_blocks", ["code"], unique=False)
    op.create_index("ix_html_blocks_deleted_at", "html_blocks", ["deleted_at"], unique=False)
    op.create_index("ix_html_blocks_store_code_active", "html_blocks", ["store_id", "code", "is_active"], unique=False)

    op.create_table(
        "html_block_translations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("html_block_id", sa.Integer(), nullable=False),
        sa.Column("locale", sa.String(length=10), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["html_block_id"], ["html_blocks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("html_block_id", "locale", name="uq_html_block_translations_block_locale"),
    )
    op.create_index("ix_html_block_translations_html_block_id", "html_block_translations", ["html_block_id"], unique=False)
    op.create_index("ix_html_block_translations_locale", "html_block_translations", ["locale"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_html_block_translations_locale", table_name="html_block_translations")
    op.drop_index("ix_html_block_translations_html_block_id", table_name="html_block_translations")
    op.drop_table("html_block_translations")

    op.drop_index("ix_html_blocks_store_code_active", table_name="html_blocks")
    op.drop_index("ix_html_blocks_deleted_at", table_name="html_blocks")
    op.drop_index("ix_html_blocks_code", table_name="html_blocks")
    op.drop_index("ix_html_blocks_store_id", table_name="html_blocks")
    op.drop_table("html_blocks")

    op.drop_table("html_block_store_settings")

    op.drop_index("ix_stores_code", table_name="stores")
    op.drop_table("stores")

    op.drop_index("ix_admins_login", table_name="admins")
    op.drop_table("admins")
