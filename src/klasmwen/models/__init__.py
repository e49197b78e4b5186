# src/klasmwen/models/__init__.py
"""SQLAlchemy models for the KlasMwen application."""

from .avatar import Avatar
from .comment import Comment
from .notification import Notification, NotificationType
from .post import Post, PostType
from .reaction import Bookmark, Like
from .report import Report, ReportReason, ReportStatus
from .tag import Tag, post_tags
from .user import Role, User

__all__ = [
    "Avatar",
    "Bookmark",
    "Comment",
    "Like",
    "Notification", "NotificationType",
    "Post", "PostType",
    "Report", "ReportReason", "ReportStatus",
    "Role", "User",
    "Tag", "post_tags",
]
