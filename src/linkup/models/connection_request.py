# src/linkup/models/connection_request.py
"""Model describing connection requests between users."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from linkup.db.session import Base
from linkup.db.time import utcnow


class ConnectionStatus(str, enum.Enum):
    """Request states; ``accepted`` is terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"


class ConnectionRequest(Base):
    """Directional request from ``from_user_id`` to ``to_user_id``.

    Rows are never deleted; the throttle counts them by ``created_at``.
    """

    __tablename__ = "connection_request"
    __table_args__ = (
        Index("ix_connection_request_from_created", "from_user_id", "created_at"),
        Index("ix_connection_request_to_status", "to_user_id", "status"),
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
    status: Mapped[ConnectionStatus] = mapped_column(
        Enum(
            ConnectionStatus,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=ConnectionStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
