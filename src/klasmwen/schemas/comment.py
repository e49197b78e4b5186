"""Comment-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from klasmwen.schemas.common import APIModel, CursorPagination
from klasmwen.schemas.post import PostSummary
from klasmwen.schemas.user import UserSummary


class CommentCreate(APIModel):
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: int | None = Field(None, ge=1, description="Comment being replied to")


class CommentOut(APIModel):
    id: int
    content: str
    post_id: str
    parent_id: int | None
    author: UserSummary
    mentioned_user: UserSummary | None = None
    created_at: datetime


class RootCommentOut(CommentOut):
    reply_count: int = 0


class ReplyOut(CommentOut):
    """Reply to a root comment; ``mentioned_user`` is set on replies to replies."""


class UserCommentOut(CommentOut):
    post: PostSummary
    is_reply: bool


class RootCommentPagination(CursorPagination):
    total_comments: int


class RootCommentPage(APIModel):
    data: list[RootCommentOut]
    pagination: RootCommentPagination
