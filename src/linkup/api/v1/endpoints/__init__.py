# src/linkup/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .connections import router as connections_router
from .messages import router as messages_router
from .posts import router as posts_router
from .stories import router as stories_router
from .users import router as users_router

__all__ = [
    "connections_router",
    "messages_router",
    "posts_router",
    "stories_router",
    "users_router",
]
