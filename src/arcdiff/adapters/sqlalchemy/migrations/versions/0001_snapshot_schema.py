"""Snapshot store schema

Revision ID: 0001_snapshot_schema
Revises:
Create Date: 2026-10-17 00:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from arcdiff.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_snapshot_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "metaforge_items",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("item_type", sa.String(), nullable=True),
        sa.Column("rarity", sa.String(), nullable=True),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("updated_at", sa.String(), nullable=True),
        sa.Column("cached_at", UTCDateTime(), nullable=False),
        sa.Column("raw_json", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_metaforge_items"),
    )
    op.create_table(
        "metaforge_item_links",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column("relation", sa.String(), nullable=False),
        sa.Column("related_item_id", sa.String(), nullable=True),
        sa.Column("related_name", sa.String(), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column("payload_json", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["item_id"],
            ["metaforge_items.id"],
            name="fk_metaforge_item_links_item_id_metaforge_items",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_metaforge_item_links"),
    )
    op.create_index(
        "ix_metaforge_item_links_item_id", "metaforge_item_links", ["item_id"], unique=False
    )
    op.create_index(
        "ix_metaforge_item_links_relation", "metaforge_item_links", ["relation"], unique=False
    )
    op.create_table(
        "metaforge_sync_state",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("last_synced_at", UTCDateTime(), nullable=False),
        sa.Column("version", sa.String(), nullable=False),
        sa.Column("item_count", sa.Integer(), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_metaforge_sync_state_singleton"),
        sa.PrimaryKeyConstraint("id", name="pk_metaforge_sync_state"),
    )


def downgrade() -> None:
    op.drop_table("metaforge_sync_state")
    op.drop_index("ix_metaforge_item_links_relation", table_name="metaforge_item_links")
    op.drop_index("ix_metaforge_item_links_item_id", table_name="metaforge_item_links")
    op.drop_table("metaforge_item_links")
    op.drop_table("metaforge_items")
