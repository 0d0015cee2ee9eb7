"""User-related Pydantic schemas."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .post import PostResponse

_HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9_.]{3,64}$")


class UserResponse(BaseModel):
    """Public profile fields of a user."""

    user_id: str
    handle: str
    display_name: str | None
    bio: str | None
    location: str | None
    avatar_url: str | None
    cover_url: str | None

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(BaseModel):
    """A user's profile together with their graph counts and posts."""

    user: UserResponse
    followers: list[str]
    following: list[str]
    connections: list[str]
    posts: list[PostResponse]


class ProfileUpdateRequest(BaseModel):
    """Schema for updating user profile information."""

    display_name: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        description="Optional display name (1-100 characters)",
    )
    handle: str | None = Field(None, description="Unique handle, 3-64 of [A-Za-z0-9_.]")
    bio: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=100)
    avatar_url: str | None = Field(None, description="URL issued by the media service")
    cover_url: str | None = Field(None, description="URL issued by the media service")

    @field_validator("handle")
    @classmethod
    def validate_handle(cls, v: str | None) -> str | None:
        """Validate the handle charset and length."""
        if v is None:
            return v
        if not _HANDLE_PATTERN.match(v):
            raise ValueError("Handle must be 3-64 characters of letters, digits, '_' or '.'")
        return v
