"""Bookmark services."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from klasmwen.core.errors import BookmarkNotFoundError, ConflictError
from klasmwen.models import Bookmark, Post, User
from klasmwen.schemas.common import CursorEnvelope, CursorPagination
from klasmwen.schemas.post import PostOut
from klasmwen.services.pagination import SortKey, build_compound_cursor_page
from klasmwen.services.posts import get_post_or_404, serialize_posts

logger = logging.getLogger(__name__)


def create_bookmark(db: Session, user: User, post_id: str) -> Bookmark:
    post = get_post_or_404(db, post_id)
    if db.get(Bookmark, (user.id, post.id)) is not None:
        raise ConflictError("Post already bookmarked")
    bookmark = Bookmark(user_id=user.id, post_id=post.id)
    db.add(bookmark)
    db.commit()
    logger.info("User %s bookmarked post %s", user.id, post.id)
    return bookmark


def delete_bookmark(db: Session, user: User, post_id: str) -> None:
    bookmark = db.get(Bookmark, (user.id, post_id))
    if bookmark is None:
        raise BookmarkNotFoundError()
    db.delete(bookmark)
    db.commit()
    logger.info("User %s removed bookmark on post %s", user.id, post_id)


def get_bookmarks(
    db: Session,
    user: User,
    *,
    limit: int | None,
    cursor: str | None = None,
) -> CursorEnvelope[PostOut]:
    """Return the user's bookmarked visible posts, most recently saved first."""
    stmt = (
        select(Bookmark)
        .join(Post, Bookmark.post_id == Post.id)
        .where(Bookmark.user_id == user.id, Post.hidden.is_(False))
    )
    page = build_compound_cursor_page(
        db,
        stmt,
        limit=limit,
        cursor_key={Bookmark.user_id: user.id, Bookmark.post_id: cursor} if cursor else None,
        order_by=[SortKey(Bookmark.created_at), SortKey(Bookmark.post_id)],
        cursor_value=lambda bookmark: bookmark.post_id,
    )
    return CursorEnvelope[PostOut](
        data=serialize_posts(db, [bookmark.post for bookmark in page.items]),
        pagination=CursorPagination.for_page(page),
    )
