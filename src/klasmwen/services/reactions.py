"""Like services."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from klasmwen.models import Like, NotificationType, Post, User
from klasmwen.schemas.common import CursorEnvelope, CursorPagination
from klasmwen.schemas.post import PostOut
from klasmwen.services.notifications import create_notification
from klasmwen.services.pagination import SortKey, build_compound_cursor_page
from klasmwen.services.posts import get_post_or_404, serialize_posts

logger = logging.getLogger(__name__)


def toggle_like(db: Session, user: User, post_id: str) -> bool:
    """Like the post, or remove the like if it exists. Returns the new state.

    Duplicate likes racing past the lookup are rejected by the ``(user_id,
    post_id)`` primary key and surface as a conflict.
    """
    post = get_post_or_404(db, post_id)
    existing = db.get(Like, (user.id, post.id))
    if existing is not None:
        db.delete(existing)
        db.commit()
        logger.info("User %s unliked post %s", user.id, post.id)
        return False

    db.add(Like(user_id=user.id, post_id=post.id))
    create_notification(
        db,
        user_id=post.author_id,
        actor_id=user.id,
        type=NotificationType.LIKE,
        post_id=post.id,
    )
    db.commit()
    logger.info("User %s liked post %s", user.id, post.id)
    return True


def get_liked_posts(
    db: Session,
    user_id: str,
    *,
    limit: int | None,
    cursor: str | None = None,
) -> CursorEnvelope[PostOut]:
    """Return the visible posts a user liked, most recent like first.

    The cursor is the post id of the last like seen; the like row itself is
    found through its ``(user_id, post_id)`` key.
    """
    stmt = (
        select(Like)
        .join(Post, Like.post_id == Post.id)
        .where(Like.user_id == user_id, Post.hidden.is_(False))
    )
    page = build_compound_cursor_page(
        db,
        stmt,
        limit=limit,
        cursor_key={Like.user_id: user_id, Like.post_id: cursor} if cursor else None,
        order_by=[SortKey(Like.created_at), SortKey(Like.post_id)],
        cursor_value=lambda like: like.post_id,
    )
    return CursorEnvelope[PostOut](
        data=serialize_posts(db, [like.post for like in page.items]),
        pagination=CursorPagination.for_page(page),
    )
