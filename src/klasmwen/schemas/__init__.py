# src/klasmwen/schemas/__init__.py
"""Pydantic schemas for API request/response models."""

from .avatar import AvatarBatchResponse, AvatarCreate, AvatarOut
from .comment import (
    CommentCreate,
    CommentOut,
    ReplyOut,
    RootCommentOut,
    RootCommentPage,
    RootCommentPagination,
    UserCommentOut,
)
from .common import (
    APIModel,
    CursorEnvelope,
    CursorPagination,
    MessageResponse,
    OffsetEnvelope,
    OffsetPagination,
)
from .notification import BulkUpdateResponse, NotificationOut, NotificationPage, UnreadCount
from .post import (
    LikeToggleResponse,
    PostCreate,
    PostOut,
    PostSearchPage,
    PostSummary,
    PostUpdate,
    SearchMeta,
)
from .report import (
    ReportCreate,
    ReportedComment,
    ReportedPost,
    ReportOut,
    ReportReasonOut,
    ReportStats,
    ReportStatusResponse,
    ReportStatusUpdate,
    VisibilityResponse,
    VisibilityUpdate,
)
from .tag import PopularTagList, PopularTagOut, TagCreate, TagList, TagOut
from .user import (
    GuestLoginResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    UserOut,
    UserProfile,
    UserSummary,
)

__all__ = [
    "APIModel",
    "AvatarBatchResponse",
    "AvatarCreate",
    "AvatarOut",
    "BulkUpdateResponse",
    "CommentCreate",
    "CommentOut",
    "CursorEnvelope",
    "CursorPagination",
    "GuestLoginResponse",
    "LikeToggleResponse",
    "MessageResponse",
    "NotificationOut",
    "NotificationPage",
    "OffsetEnvelope",
    "OffsetPagination",
    "PopularTagList",
    "PopularTagOut",
    "PostCreate",
    "PostOut",
    "PostSearchPage",
    "PostSummary",
    "PostUpdate",
    "ProfileUpdate",
    "ProfileUpdateResponse",
    "ReplyOut",
    "ReportCreate",
    "ReportOut",
    "ReportReasonOut",
    "ReportStats",
    "ReportStatusResponse",
    "ReportStatusUpdate",
    "ReportedComment",
    "ReportedPost",
    "RootCommentOut",
    "RootCommentPage",
    "RootCommentPagination",
    "SearchMeta",
    "TagCreate",
    "TagList",
    "TagOut",
    "UnreadCount",
    "UserCommentOut",
    "UserOut",
    "UserProfile",
    "UserSummary",
    "VisibilityResponse",
    "VisibilityUpdate",
]
