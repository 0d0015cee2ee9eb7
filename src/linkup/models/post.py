# src/linkup/models/post.py
"""SQLAlchemy models for posts and likes."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from linkup.db.session import Base
from linkup.db.time import utcnow


class PostType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    TEXT_WITH_IMAGE = "text_with_image"


class Post(Base):
    """Feed entry. Immutable after creation apart from its likes."""

    __tablename__ = "post"
    __table_args__ = (Index("ix_post_author_created", "author_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Ordered media URLs produced by the external media service.
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    post_type: Mapped[PostType] = mapped_column(
        Enum(
            PostType,
            native_enum=False,
            length=32,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class PostLike(Base):
    """Membership row of a post's ``liked_by`` set."""

    __tablename__ = "post_like"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
