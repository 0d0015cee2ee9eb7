# src/linkup/models/__init__.py
"""SQLAlchemy models for the Linkup application."""

from .connection_request import ConnectionRequest, ConnectionStatus
from .message import Message, MessageType
from .post import Post, PostLike, PostType
from .story import MediaType, Story
from .user import Connection, Follow, User

__all__ = [
    "ConnectionRequest", "ConnectionStatus",
    "Message", "MessageType",
    "Post", "PostLike", "PostType",
    "MediaType", "Story",
    "Connection", "Follow", "User",
]
