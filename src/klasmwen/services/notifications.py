"""Notification services: fan-out from likes/comments and the inbox operations."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from klasmwen.core.errors import NotificationNotFoundError
from klasmwen.core.policy import assert_permission
from klasmwen.models import Notification, NotificationType, User
from klasmwen.schemas.common import CursorPagination
from klasmwen.schemas.notification import NotificationOut, NotificationPage
from klasmwen.services.pagination import build_page

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    *,
    user_id: str,
    actor_id: str,
    type: NotificationType,
    post_id: str | None = None,
    comment_id: int | None = None,
) -> Notification | None:
    """Queue a notification for ``user_id`` unless the actor is the recipient.

    The caller owns the transaction; the row is added to the session only.
    """
    if user_id == actor_id:
        logger.debug("Skipping %s self-notification for user %s", type.value, user_id)
        return None

    notification = Notification(
        user_id=user_id,
        actor_id=actor_id,
        type=type,
        post_id=post_id,
        comment_id=comment_id,
    )
    db.add(notification)
    return notification


def count_unread(db: Session, user: User) -> int:
    return db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user.id, Notification.read.is_(False))
    ) or 0


def list_notifications(
    db: Session,
    user: User,
    *,
    limit: int | None,
    cursor: int | None = None,
    read: bool | None = None,
    type: NotificationType | None = None,
) -> NotificationPage:
    """Return the user's notifications newest first, with the unread total."""
    stmt = select(Notification).where(Notification.user_id == user.id)
    if read is not None:
        stmt = stmt.where(Notification.read.is_(read))
    if type is not None:
        stmt = stmt.where(Notification.type == type)

    page = build_page(db, stmt, limit=limit, cursor=cursor, cursor_field=Notification.id)
    return NotificationPage(
        data=[NotificationOut.model_validate(item) for item in page.items],
        pagination=CursorPagination.for_page(page),
        unread_count=count_unread(db, user),
    )


def _get_notification(db: Session, notification_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if notification is None:
        raise NotificationNotFoundError()
    return notification


def mark_as_read(db: Session, user: User, notification_id: int) -> Notification:
    notification = _get_notification(db, notification_id)
    assert_permission(user, "notifications", "update", notification)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user: User) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    logger.info("Marked %d notifications read for user %s", result.rowcount, user.id)
    return result.rowcount


def delete_notification(db: Session, user: User, notification_id: int) -> None:
    notification = _get_notification(db, notification_id)
    assert_permission(user, "notifications", "delete", notification)
    db.delete(notification)
    db.commit()


def delete_all(db: Session, user: User, *, read_only: bool = False) -> int:
    """Delete the user's notifications, or only the read ones."""
    stmt = delete(Notification).where(Notification.user_id == user.id)
    if read_only:
        stmt = stmt.where(Notification.read.is_(True))
    result = db.execute(stmt.execution_options(synchronize_session="fetch"))
    db.commit()
    logger.info(
        "Deleted %d %snotifications for user %s",
        result.rowcount,
        "read " if read_only else "",
        user.id,
    )
    return result.rowcount
