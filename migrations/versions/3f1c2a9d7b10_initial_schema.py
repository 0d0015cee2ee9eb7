"""initial schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-17 09:12:41.508213

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _user_fk(column: str) -> sa.Column:
    return sa.Column(
        column,
        sa.String(length=128),
        sa.ForeignKey("user_account.user_id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    """Create profile, graph, content and message tables."""
    op.create_table(
        "user_account",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("handle", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("cover_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("handle"),
    )
    op.create_table(
        "follow",
        _user_fk("follower_id"),
        _user_fk("followee_id"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("follower_id", "followee_id"),
        sa.CheckConstraint("follower_id <> followee_id", name="ck_follow_not_self"),
    )
    op.create_index("ix_follow_followee_id", "follow", ["followee_id"])
    op.create_table(
        "connection",
        _user_fk("user_id"),
        _user_fk("peer_id"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "peer_id"),
        sa.CheckConstraint("user_id <> peer_id", name="ck_connection_not_self"),
    )
    op.create_table(
        "connection_request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _user_fk("from_user_id"),
        _user_fk("to_user_id"),
        sa.Column("status", sa.Enum("pending", "accepted", name="connectionstatus", native_enum=False, length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_connection_request_from_created",
        "connection_request",
        ["from_user_id", "created_at"],
    )
    op.create_index(
        "ix_connection_request_to_status",
        "connection_request",
        ["to_user_id", "status"],
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _user_fk("author_id"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("image_urls", sa.JSON(), nullable=False),
        sa.Column("post_type", sa.Enum("text", "image", "text_with_image", name="posttype", native_enum=False, length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_author_created", "post", ["author_id", "created_at"])
    op.create_table(
        "post_like",
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("post.id", ondelete="CASCADE"), nullable=False),
        _user_fk("user_id"),
        sa.PrimaryKeyConstraint("post_id", "user_id"),
    )
    op.create_table(
        "story",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _user_fk("author_id"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("media_type", sa.Enum("text", "image", "video", name="mediatype", native_enum=False, length=16), nullable=False),
        sa.Column("background_color", sa.String(length=16), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_story_author_created", "story", ["author_id", "created_at"])
    op.create_table(
        "message",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _user_fk("from_user_id"),
        _user_fk("to_user_id"),
        sa.Column("text", sa.Text(), nullable=True),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("message_type", sa.Enum("text", "image", name="messagetype", native_enum=False, length=16), nullable=False),
        sa.Column("seen", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_message_pair_created",
        "message",
        ["from_user_id", "to_user_id", "created_at"],
    )
    op.create_index("ix_message_to_seen", "message", ["to_user_id", "seen"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("message")
    op.drop_table("story")
    op.drop_table("post_like")
    op.drop_table("post")
    op.drop_table("connection_request")
    op.drop_table("connection")
    op.drop_table("follow")
    op.drop_table("user_account")
