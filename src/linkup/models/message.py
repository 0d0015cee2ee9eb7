# src/linkup/models/message.py
"""Models describing direct messages between users."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from linkup.db.session import Base
from linkup.db.time import utcnow


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"


class Message(Base):
    """Direct message; the store is the source of truth for delivery.

    ``seen`` starts false and is flipped once, when the recipient reads the
    thread.
    """

    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_pair_created", "from_user_id", "to_user_id", "created_at"),
        Index("ix_message_to_seen", "to_user_id", "seen"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    to_user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("user_account.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    message_type: Mapped[MessageType] = mapped_column(
        Enum(
            MessageType,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=MessageType.TEXT,
        nullable=False,
    )
    seen: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
