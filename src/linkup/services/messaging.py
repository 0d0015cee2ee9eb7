"""Direct messaging: persistence first, live delivery second."""
from __future__ import annotations

import logging

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from linkup.core.errors import NotFoundError, ValidationFailedError
from linkup.models import Message, MessageType
from linkup.services import graph
from linkup.services.realtime import DeliveryHub

logger = logging.getLogger(__name__)


def send_message(
    db: Session,
    hub: DeliveryHub,
    sender_id: str,
    recipient_id: str,
    *,
    text: str | None = None,
    media_url: str | None = None,
    message_type: MessageType = MessageType.TEXT,
) -> Message:
    """Persist a message, then push it to the recipient's live channel.

    The commit is the durability boundary. Whether the push reaches anyone
    has no effect on the result.

    Raises:
        NotFoundError: If the recipient does not exist.
        ValidationFailedError: If the payload doesn't match ``message_type``.
    """
    graph.require_user(db, recipient_id)
    if message_type is MessageType.TEXT and not (text and text.strip()):
        raise ValidationFailedError("A text message needs text")
    if message_type is MessageType.IMAGE and not media_url:
        raise ValidationFailedError("An image message needs a media URL")

    message = Message(
        from_user_id=sender_id,
        to_user_id=recipient_id,
        text=text,
        media_url=media_url,
        message_type=message_type,
        seen=False,
    )
    db.add(message)
    db.commit()
    db.refresh(message)

    if hub.deliver(message):
        logger.debug("Pushed message %s to %s", message.id, recipient_id)
    return message


def get_thread(db: Session, viewer_id: str, other_id: str) -> list[Message]:
    """Return the conversation between two users, newest first.

    Every unseen message ``other_id`` sent to ``viewer_id`` is marked seen
    in one update before the thread is read back.
    """
    graph.require_user(db, other_id)

    db.execute(
        update(Message)
        .where(
            Message.from_user_id == other_id,
            Message.to_user_id == viewer_id,
            Message.seen.is_(False),
        )
        .values(seen=True)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()

    stmt = (
        select(Message)
        .where(
            or_(
                and_(Message.from_user_id == viewer_id, Message.to_user_id == other_id),
                and_(Message.from_user_id == other_id, Message.to_user_id == viewer_id),
            )
        )
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    return list(db.scalars(stmt))


def recent_messages(db: Session, viewer_id: str, limit: int = 20) -> list[Message]:
    """Latest message received from each counterpart, newest first."""
    latest = (
        select(func.max(Message.id).label("id"))
        .where(Message.to_user_id == viewer_id)
        .group_by(Message.from_user_id)
        .subquery()
    )
    stmt = (
        select(Message)
        .join(latest, Message.id == latest.c.id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt))
