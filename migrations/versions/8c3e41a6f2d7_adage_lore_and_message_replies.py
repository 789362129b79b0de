"""adage lore and message replies

Revision ID: 8c3e41a6f2d7
Revises: 5b1f2c9d7a40
Create Date: 2026-10-19 14:30:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8c3e41a6f2d7"
down_revision: Union[str, Sequence[str], None] = "5b1f2c9d7a40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TS = sa.DateTime(timezone=True)


def upgrade() -> None:
    """Add variants, translations, usage examples, timeline, relations and replies."""
    op.create_table(
        "adage_variants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("adage_id", sa.Integer(), nullable=False),
        sa.Column("variant_text", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.Column("deleted_at", TS, nullable=True),
        sa.ForeignKeyConstraint(["adage_id"], ["adages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_adage_variants_adage_id"), "adage_variants", ["adage_id"])

    op.create_table(
        "adage_translations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("adage_id", sa.Integer(), nullable=False),
        sa.Column("language_code", sa.String(length=16), nullable=False),
        sa.Column("translated_text", sa.Text(), nullable=False),
        sa.Column("translator_notes", sa.Text(), nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.Column("deleted_at", TS, nullable=True),
        sa.ForeignKeyConstraint(["adage_id"], ["adages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_adage_translations_adage_id"), "adage_translations", ["adage_id"]
    )

    op.create_table(
        "adage_usage_examples",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("adage_id", sa.Integer(), nullable=False),
        sa.Column("example_text", sa.Text(), nullable=False),
        sa.Column("context", sa.Text(), nullable=True),
        sa.Column("source_type", sa.String(length=16), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.Column("deleted_at", TS, nullable=True),
        sa.Column("hidden_at", TS, nullable=True),
        sa.ForeignKeyConstraint(["adage_id"], ["adages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_adage_usage_examples_adage_id"), "adage_usage_examples", ["adage_id"]
    )

    op.create_table(
        "adage_timeline",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("adage_id", sa.Integer(), nullable=False),
        sa.Column("time_period_start", sa.Date(), nullable=False),
        sa.Column("time_period_end", sa.Date(), nullable=True),
        sa.Column("popularity_level", sa.String(length=16), nullable=False),
        sa.Column("primary_location", sa.Text(), nullable=True),
        sa.Column("geographic_changes", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("sources", sa.JSON(), nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.Column("deleted_at", TS, nullable=True),
        sa.ForeignKeyConstraint(["adage_id"], ["adages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_adage_timeline_adage_id"), "adage_timeline", ["adage_id"])

    op.create_table(
        "related_adages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("adage_id", sa.Integer(), nullable=False),
        sa.Column("related_adage_id", sa.Integer(), nullable=False),
        sa.Column("relationship_type", sa.String(length=32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.ForeignKeyConstraint(["adage_id"], ["adages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["related_adage_id"], ["adages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "adage_id", "related_adage_id", "relationship_type", name="uq_related_adages_link"
        ),
    )
    op.create_index(op.f("ix_related_adages_adage_id"), "related_adages", ["adage_id"])

    op.create_table(
        "message_replies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("message_id", sa.Integer(), nullable=False),
        sa.Column("replied_by", sa.Integer(), nullable=True),
        sa.Column("reply_text", sa.Text(), nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.ForeignKeyConstraint(["message_id"], ["contact_messages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["replied_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_message_replies_message_id"), "message_replies", ["message_id"])


def downgrade() -> None:
    """Drop the lore and reply tables."""
    op.drop_index(op.f("ix_message_replies_message_id"), table_name="message_replies")
    op.drop_table("message_replies")
    op.drop_index(op.f("ix_related_adages_adage_id"), table_name="related_adages")
    op.drop_table("related_adages")
    op.drop_index(op.f("ix_adage_timeline_adage_id"), table_name="adage_timeline")
    op.drop_table("adage_timeline")
    op.drop_index(op.f("ix_adage_usage_examples_adage_id"), table_name="adage_usage_examples")
    op.drop_table("adage_usage_examples")
    op.drop_index(op.f("ix_adage_translations_adage_id"), table_name="adage_translations")
    op.drop_table("adage_translations")
    op.drop_index(op.f("ix_adage_variants_adage_id"), table_name="adage_variants")
    op.drop_table("adage_variants")
