"""Notification Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from klasmwen.models.notification import NotificationType
from klasmwen.schemas.common import APIModel, CursorPagination
from klasmwen.schemas.user import UserSummary


class NotificationOut(APIModel):
    id: int
    type: NotificationType
    read: bool
    created_at: datetime
    actor: UserSummary
    post_id: str | None = None
    comment_id: int | None = None


class NotificationPage(APIModel):
    data: list[NotificationOut]
    pagination: CursorPagination
    unread_count: int


class UnreadCount(APIModel):
    unread_count: int


class BulkUpdateResponse(APIModel):
    message: str
    count: int
