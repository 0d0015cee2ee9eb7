"""Follow graph and connection-set helpers.

Follow edges are directed and idempotent: following twice, or unfollowing a
user you don't follow, leaves the graph unchanged. Connection rows are
written only by the connection workflow, always in both directions.
"""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkup.core.errors import InvalidTargetError, NotFoundError
from linkup.models import Connection, Follow, User

__all__ = [
    "add_connection",
    "connections_of",
    "follow",
    "followers_of",
    "following_of",
    "require_user",
    "unfollow",
]


def require_user(db: Session, user_id: str) -> User:
    """Return the user or raise ``NotFoundError``."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def follow(db: Session, follower_id: str, target_id: str) -> None:
    """Make ``follower_id`` follow ``target_id``."""
    if follower_id == target_id:
        raise InvalidTargetError("You cannot follow yourself")
    require_user(db, follower_id)
    require_user(db, target_id)

    if db.get(Follow, (follower_id, target_id)) is not None:
        return
    db.add(Follow(follower_id=follower_id, followee_id=target_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent follow inserted the same edge first.
        db.rollback()


def unfollow(db: Session, follower_id: str, target_id: str) -> None:
    """Remove the follow edge if present."""
    if follower_id == target_id:
        raise InvalidTargetError("You cannot unfollow yourself")
    require_user(db, target_id)

    db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.followee_id == target_id,
        )
    )
    db.commit()


def followers_of(db: Session, user_id: str) -> set[str]:
    rows = db.scalars(select(Follow.follower_id).where(Follow.followee_id == user_id))
    return set(rows)


def following_of(db: Session, user_id: str) -> set[str]:
    rows = db.scalars(select(Follow.followee_id).where(Follow.follower_id == user_id))
    return set(rows)


def connections_of(db: Session, user_id: str) -> set[str]:
    rows = db.scalars(select(Connection.peer_id).where(Connection.user_id == user_id))
    return set(rows)


def add_connection(db: Session, user_a: str, user_b: str) -> None:
    """Stage both directions of an accepted connection; the caller commits.

    Each new row is flushed right away so a repeated call in the same
    transaction finds it and stays a no-op.
    """
    if user_a == user_b:
        raise InvalidTargetError("You cannot connect to yourself")
    for user_id, peer_id in ((user_a, user_b), (user_b, user_a)):
        if db.get(Connection, (user_id, peer_id)) is None:
            db.add(Connection(user_id=user_id, peer_id=peer_id))
            db.flush()
