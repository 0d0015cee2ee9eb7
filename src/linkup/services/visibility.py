"""Feed and story visibility.

A viewer sees content from themselves, their connections and the users they
follow. Feed and stories use the same author set and the same ordering:
newest first, ties broken by id so the order is stable.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkup.core.settings import settings
from linkup.db.time import hours_before, utcnow
from linkup.models import Post, Story
from linkup.services import graph


def visible_authors(db: Session, viewer_id: str) -> set[str]:
    """Return ``{viewer} ∪ connections ∪ following`` for ``viewer_id``."""
    graph.require_user(db, viewer_id)
    return (
        {viewer_id}
        | graph.connections_of(db, viewer_id)
        | graph.following_of(db, viewer_id)
    )


def feed(db: Session, viewer_id: str, limit: int | None = None) -> list[Post]:
    """Posts by visible authors, newest first."""
    authors = visible_authors(db, viewer_id)
    stmt = (
        select(Post)
        .where(Post.author_id.in_(authors))
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt))


def active_stories(db: Session, viewer_id: str, *, now: datetime | None = None) -> list[Story]:
    """Unexpired stories by visible authors, newest first."""
    authors = visible_authors(db, viewer_id)
    now = now or utcnow()
    cutoff = hours_before(now, settings.story_ttl_hours)
    stmt = (
        select(Story)
        .where(
            Story.author_id.in_(authors),
            Story.created_at >= cutoff,
            Story.created_at <= now,
        )
        .order_by(Story.created_at.desc(), Story.id.desc())
    )
    return list(db.scalars(stmt))
