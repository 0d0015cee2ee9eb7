"""CRUD-style helpers for managing user profiles."""
from __future__ import annotations

import logging
import re
import secrets
from collections.abc import Mapping
from typing import Any, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkup.core.errors import ValidationFailedError
from linkup.models.user import User
from linkup.schemas.user import ProfileResponse, ProfileUpdateRequest, UserResponse
from linkup.services import content, graph

__all__ = [
    "discover",
    "ensure_user",
    "get_profile",
    "get_user",
    "update_profile",
]

logger = logging.getLogger(__name__)

_HANDLE_STRIP = re.compile(r"[^A-Za-z0-9_.]")


def _base_handle(user_id: str, claims: Mapping[str, Any]) -> str:
    raw = claims.get("preferred_username") or ""
    if not raw and isinstance(claims.get("email"), str):
        raw = claims["email"].split("@", 1)[0]
    handle = _HANDLE_STRIP.sub("", str(raw))[:56] or _HANDLE_STRIP.sub("", user_id)[:56]
    return handle if len(handle) >= 3 else f"user_{handle}"


def _handle_taken(db: Session, handle: str) -> bool:
    return db.scalar(select(User.user_id).where(User.handle == handle)) is not None


_PROVISION_ATTEMPTS = 5


def _suffixed(handle: str) -> str:
    return f"{handle[:56]}{secrets.randbelow(10_000)}"


def ensure_user(db: Session, user_id: str, claims: Mapping[str, Any] | None = None) -> User:
    """Return the user, provisioning a profile on first authenticated contact.

    The handle comes from the identity claims and gets a random numeric
    suffix when already taken. A handle claimed by a concurrent signup is
    retried with a fresh suffix.
    """
    user = db.get(User, user_id)
    if user is not None:
        return user

    claims = claims or {}
    base = _base_handle(user_id, claims)
    name = claims.get("name")
    handle = base
    for _ in range(_PROVISION_ATTEMPTS):
        while _handle_taken(db, handle):
            handle = _suffixed(base)
        user = User(user_id=user_id, handle=handle, display_name=name if isinstance(name, str) else None)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            # Either the same user was provisioned concurrently or the
            # handle was taken between the check and the insert.
            existing = db.get(User, user_id)
            if existing is not None:
                return existing
            logger.info("Handle %s taken during provisioning of %s, retrying", handle, user_id)
            handle = _suffixed(base)
            continue
        db.refresh(user)
        return user
    raise ValidationFailedError("Could not allocate a unique handle")


def get_user(db: Session, user_id: str) -> User:
    """Return the user or raise ``NotFoundError``."""
    return graph.require_user(db, user_id)


def get_profile(db: Session, user_id: str, limit: int = 50) -> ProfileResponse:
    """Assemble a user's profile: graph membership plus their newest posts."""
    user = get_user(db, user_id)
    posts = content.posts_by(db, user_id, limit=limit)
    return ProfileResponse(
        user=UserResponse.model_validate(user),
        followers=sorted(graph.followers_of(db, user_id)),
        following=sorted(graph.following_of(db, user_id)),
        connections=sorted(graph.connections_of(db, user_id)),
        posts=content.to_post_responses(db, posts),
    )


def update_profile(db: Session, user: User, update_data: ProfileUpdateRequest) -> User:
    """Apply partial updates to an existing user."""
    update_dict = update_data.model_dump(exclude_unset=True)
    handle = update_dict.get("handle")
    if handle is not None and handle != user.handle and _handle_taken(db, handle):
        raise ValidationFailedError("Handle is already taken")

    for key, value in update_dict.items():
        setattr(user, key, value)

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # The handle was claimed between the check above and this commit.
        db.rollback()
        raise ValidationFailedError("Handle is already taken") from exc
    db.refresh(user)
    return user


def discover(db: Session, viewer_id: str, query: str, limit: int = 50) -> Sequence[User]:
    """Find users whose handle, name, bio or location contains ``query``."""
    term = query.strip().lower()
    if not term:
        return []
    pattern = f"%{term}%"
    stmt = (
        select(User)
        .where(
            User.user_id != viewer_id,
            or_(
                func.lower(User.handle).like(pattern),
                func.lower(User.display_name).like(pattern),
                func.lower(User.bio).like(pattern),
                func.lower(User.location).like(pattern),
            ),
        )
        .order_by(User.handle)
        .limit(limit)
    )
    return db.scalars(stmt).all()
