# src/klasmwen/api/v1/endpoints/notifications.py
"""Notification inbox endpoints; every route acts on the caller's own notifications."""

from fastapi import APIRouter, Query

from klasmwen.api.v1.dependencies import CurrentUserDep, IdCursorDep, LimitDep, SessionDep
from klasmwen.models import NotificationType
from klasmwen.schemas.common import MessageResponse
from klasmwen.schemas.notification import (
    BulkUpdateResponse,
    NotificationOut,
    NotificationPage,
    UnreadCount,
)
from klasmwen.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
async def list_notifications(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: LimitDep,
    cursor: IdCursorDep,
    read: bool | None = Query(None),
    type: NotificationType | None = Query(None),
) -> NotificationPage:
    return notification_service.list_notifications(
        db,
        current_user,
        limit=limit,
        cursor=cursor,
        read=read,
        type=type,
    )


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(current_user: CurrentUserDep, db: SessionDep) -> UnreadCount:
    return UnreadCount(unread_count=notification_service.count_unread(db, current_user))


@router.patch("/read-all", response_model=BulkUpdateResponse)
async def mark_all_read(current_user: CurrentUserDep, db: SessionDep) -> BulkUpdateResponse:
    count = notification_service.mark_all_as_read(db, current_user)
    return BulkUpdateResponse(message="All notifications marked as read", count=count)


@router.patch("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> NotificationOut:
    notification = notification_service.mark_as_read(db, current_user, notification_id)
    return NotificationOut.model_validate(notification)


@router.delete("", response_model=BulkUpdateResponse)
async def delete_notifications(
    current_user: CurrentUserDep,
    db: SessionDep,
    read_only: bool = Query(False, description="Delete only read notifications"),
) -> BulkUpdateResponse:
    count = notification_service.delete_all(db, current_user, read_only=read_only)
    return BulkUpdateResponse(message="Notifications deleted successfully", count=count)


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    notification_service.delete_notification(db, current_user, notification_id)
    return MessageResponse(message="Notification deleted successfully")
