"""Profile, discovery and follow endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from linkup.models import User
from linkup.schemas.user import ProfileResponse, ProfileUpdateRequest, UserResponse
from linkup.services import graph
from linkup.services import users as user_service

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUserDep) -> User:
    """Return the caller's profile."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_me(
    update_data: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> User:
    """Update the caller's profile fields."""
    return user_service.update_profile(db, current_user, update_data)


@router.get("/discover", response_model=list[UserResponse])
async def discover_users(
    current_user: CurrentUserDep,
    db: SessionDep,
    q: str = Query(..., min_length=1, description="Text matched against handle, name, bio and location"),
    limit: int = Query(50, le=100),
) -> list[User]:
    """Search for other users."""
    return list(user_service.discover(db, current_user.user_id, q, limit=limit))


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(50, le=100),
) -> ProfileResponse:
    """Return a user's profile, graph membership and posts.

    Requires an authenticated caller.
    """
    return user_service.get_profile(db, user_id, limit=limit)


@router.post("/{user_id}/follow", status_code=status.HTTP_200_OK)
async def follow_user(user_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    """Follow another user. Following twice is a no-op."""
    graph.follow(db, current_user.user_id, user_id)
    return {"status": "following"}


@router.delete("/{user_id}/follow", status_code=status.HTTP_200_OK)
async def unfollow_user(user_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    """Stop following a user. Unfollowing someone not followed is a no-op."""
    graph.unfollow(db, current_user.user_id, user_id)
    return {"status": "not_following"}
