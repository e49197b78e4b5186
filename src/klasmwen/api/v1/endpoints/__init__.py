# src/klasmwen/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .avatars import router as avatars_router
from .bookmarks import router as bookmarks_router
from .comments import router as comments_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .reactions import router as reactions_router
from .reports import router as reports_router
from .search import router as search_router
from .tags import router as tags_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "posts_router",
    "comments_router",
    "reactions_router",
    "bookmarks_router",
    "reports_router",
    "notifications_router",
    "users_router",
    "avatars_router",
    "tags_router",
    "search_router",
]
