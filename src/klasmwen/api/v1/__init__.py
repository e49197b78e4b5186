# src/klasmwen/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    avatars_router,
    bookmarks_router,
    comments_router,
    notifications_router,
    posts_router,
    reactions_router,
    reports_router,
    search_router,
    tags_router,
    users_router,
)

__all__ = [
    "auth_router",
    "avatars_router",
    "bookmarks_router",
    "comments_router",
    "notifications_router",
    "posts_router",
    "reactions_router",
    "reports_router",
    "search_router",
    "tags_router",
    "users_router",
]
