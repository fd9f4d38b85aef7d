"""Начальная схема: одобренные группы, посты-розыгрыши, заявки, история победителей

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "approved_groups",
        sa.Column("group_id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("approved_by", sa.BigInteger(), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("group_id"),
    )

    op.create_table(
        "giveaway_posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("channel_id", sa.BigInteger(), nullable=False),
        sa.Column("channel_post_id", sa.BigInteger(), nullable=False),
        sa.Column("discussion_group_id", sa.BigInteger(), nullable=True),
        sa.Column("mention_tag", sa.String(), nullable=True),
        sa.Column("picked", sa.Boolean(), nullable=False),
        sa.Column("picked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("drawing_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("channel_id", "channel_post_id", name="uq_giveaway_post"),
    )

    op.create_table(
        "entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("channel_id", sa.BigInteger(), nullable=False),
        sa.Column("channel_post_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("comment_message_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "channel_id", "channel_post_id", "user_id", name="uq_entry_user_post"),
    )
    op.create_index("idx_entries_post", "entries", ["group_id", "channel_id", "channel_post_id"])

    op.create_table(
        "winner_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("channel_id", sa.BigInteger(), nullable=False),
        sa.Column("channel_post_id", sa.BigInteger(), nullable=False),
        sa.Column("winner_user_id", sa.BigInteger(), nullable=False),
        sa.Column("winner_username", sa.String(), nullable=True),
        sa.Column("winner_name", sa.String(), nullable=True),
        sa.Column("winner_comment", sa.Text(), nullable=True),
        sa.Column("picked_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_winner_history_group_picked_at",
        "winner_history",
        ["group_id", sa.text("picked_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_winner_history_group_picked_at", table_name="winner_history")
    op.drop_table("winner_history")
    op.drop_index("idx_entries_post", table_name="entries")
    op.drop_table("entries")
    op.drop_table("giveaway_posts")
    op.drop_table("approved_groups")
