# src/linkup/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    connections_router,
    messages_router,
    posts_router,
    stories_router,
    users_router,
)

__all__ = [
    "connections_router",
    "messages_router",
    "posts_router",
    "stories_router",
    "users_router",
]
