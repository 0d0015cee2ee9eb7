"""Connection request workflow.

Each ordered pair ``(from, to)`` moves ``no request -> pending -> accepted``;
there is no rejection or cancellation and an accepted row never changes
again. Requests are not deduplicated: repeating a request adds another
pending row, and every row counts against the sender's sliding-window quota.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from linkup.core.errors import InvalidTargetError, NotFoundError, RateLimitedError
from linkup.core.settings import settings
from linkup.db.time import hours_before, utcnow
from linkup.models import ConnectionRequest, ConnectionStatus, User
from linkup.services import graph
from linkup.services.events import CONNECTION_REQUESTED, EventTrigger

logger = logging.getLogger(__name__)


@dataclass
class ConnectionsSummary:
    connections: set[str]
    followers: set[str]
    following: set[str]
    pending_incoming: list[ConnectionRequest]


def requests_in_window(db: Session, from_user_id: str, now: datetime) -> int:
    """Count requests ``from_user_id`` created in ``[now - window, now]``."""
    window_start = hours_before(now, settings.connection_request_window_hours)
    count = db.scalar(
        select(func.count())
        .select_from(ConnectionRequest)
        .where(
            ConnectionRequest.from_user_id == from_user_id,
            ConnectionRequest.created_at >= window_start,
            ConnectionRequest.created_at <= now,
        )
    )
    return int(count or 0)


def request_connection(
    db: Session,
    from_user_id: str,
    to_user_id: str,
    trigger: EventTrigger,
    *,
    now: datetime | None = None,
) -> ConnectionRequest:
    """Create a pending request from ``from_user_id`` to ``to_user_id``.

    Raises:
        InvalidTargetError: If both ids are the same user.
        NotFoundError: If either user does not exist.
        RateLimitedError: If the sender already created the maximum number of
            requests within the trailing window.
    """
    if from_user_id == to_user_id:
        raise InvalidTargetError("You cannot connect to yourself")
    now = now or utcnow()

    # Lock the sender's row so concurrent requests from the same user count
    # and insert one at a time. SQLite drops FOR UPDATE and pysqlite only
    # begins the transaction at the INSERT, so two racing requests there can
    # both pass the count and overshoot the limit.
    sender = db.scalars(
        select(User).where(User.user_id == from_user_id).with_for_update()
    ).first()
    if sender is None:
        raise NotFoundError("User not found")
    graph.require_user(db, to_user_id)

    if requests_in_window(db, from_user_id, now) >= settings.connection_request_limit:
        db.rollback()
        logger.info("Throttled connection request from %s", from_user_id)
        raise RateLimitedError(
            "You have sent too many connection requests in the last "
            f"{settings.connection_request_window_hours} hours"
        )

    request = ConnectionRequest(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status=ConnectionStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    trigger.emit(
        CONNECTION_REQUESTED,
        user_ids=(from_user_id, to_user_id),
        entity_id=request.id,
        timestamp=now,
    )
    return request


def accept_connection(db: Session, accepter_id: str, requester_id: str) -> list[ConnectionRequest]:
    """Accept the pending request(s) ``requester_id`` sent to ``accepter_id``.

    Only the addressee may accept. Duplicate pending rows for the same
    direction are accepted together, and both users gain each other as a
    connection in the same commit.

    Raises:
        NotFoundError: If no pending request from ``requester_id`` exists.
    """
    pending = list(
        db.scalars(
            select(ConnectionRequest)
            .where(
                ConnectionRequest.from_user_id == requester_id,
                ConnectionRequest.to_user_id == accepter_id,
                ConnectionRequest.status == ConnectionStatus.PENDING,
            )
            .order_by(ConnectionRequest.id)
        )
    )
    if not pending:
        raise NotFoundError("Connection request not found")

    now = utcnow()
    accepted_ids = [request.id for request in pending]
    db.execute(
        update(ConnectionRequest)
        .where(
            ConnectionRequest.id.in_(accepted_ids),
            ConnectionRequest.status == ConnectionStatus.PENDING,
        )
        .values(status=ConnectionStatus.ACCEPTED, updated_at=now)
        .execution_options(synchronize_session="fetch")
    )
    graph.add_connection(db, accepter_id, requester_id)
    db.commit()

    for request in pending:
        db.refresh(request)
    return pending


def pending_incoming(db: Session, user_id: str) -> list[ConnectionRequest]:
    """Pending requests addressed to ``user_id``, newest first."""
    return list(
        db.scalars(
            select(ConnectionRequest)
            .where(
                ConnectionRequest.to_user_id == user_id,
                ConnectionRequest.status == ConnectionStatus.PENDING,
            )
            .order_by(ConnectionRequest.created_at.desc(), ConnectionRequest.id.desc())
        )
    )


def list_connections(db: Session, user_id: str) -> ConnectionsSummary:
    graph.require_user(db, user_id)
    return ConnectionsSummary(
        connections=graph.connections_of(db, user_id),
        followers=graph.followers_of(db, user_id),
        following=graph.following_of(db, user_id),
        pending_incoming=pending_incoming(db, user_id),
    )
