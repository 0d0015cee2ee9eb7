# src/linkup/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .connection import ConnectionRequestResponse, ConnectionsOverview
from .message import MessageCreate, MessageResponse
from .post import LikeResponse, PostCreate, PostResponse
from .story import StoryCreate, StoryResponse
from .user import ProfileResponse, ProfileUpdateRequest, UserResponse

__all__ = [
    "ConnectionRequestResponse", "ConnectionsOverview",
    "MessageCreate", "MessageResponse",
    "LikeResponse", "PostCreate", "PostResponse",
    "StoryCreate", "StoryResponse",
    "ProfileResponse", "ProfileUpdateRequest", "UserResponse",
]
