# src/linkup/models/user.py
"""SQLAlchemy models for user profiles and the relationship graph."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from linkup.db.session import Base
from linkup.db.time import utcnow


class User(Base):
    """Profile keyed by the identity provider's stable user id.

    The follower, following and connection sets live in the ``follow`` and
    ``connection`` edge tables rather than on the row itself.
    """

    __tablename__ = "user_account"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    handle: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


class Follow(Base):
    """Directed follow edge: ``follower_id`` follows ``followee_id``."""

    __tablename__ = "follow"
    __table_args__ = (CheckConstraint("follower_id <> followee_id", name="ck_follow_not_self"),)

    follower_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    followee_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Connection(Base):
    """One direction of an accepted connection.

    An accepted relationship is always stored as two rows, ``(a, b)`` and
    ``(b, a)``, so each user's connection set is a single indexed lookup.
    """

    __tablename__ = "connection"
    __table_args__ = (CheckConstraint("user_id <> peer_id", name="ck_connection_not_self"),)

    user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    peer_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
