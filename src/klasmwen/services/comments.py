"""Threaded comment services.

Comments are stored two-tier. A root comment has no parent and every reply
points at its root, including replies to replies. The reply being answered
is remembered through ``mentioned_user_id`` (its author), so a thread is
displayed as root, first-level replies, and deep replies marked "replying to
@user" without walking a tree.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from klasmwen.core.errors import (
    CommentNotFoundError,
    CommentPostMismatchError,
    UserNotFoundError,
    ValidationError,
)
from klasmwen.core.policy import assert_permission
from klasmwen.models import Comment, NotificationType, Post, User
from klasmwen.schemas.comment import (
    CommentOut,
    ReplyOut,
    RootCommentOut,
    RootCommentPage,
    RootCommentPagination,
    UserCommentOut,
)
from klasmwen.schemas.common import CursorEnvelope, CursorPagination
from klasmwen.schemas.post import PostSummary
from klasmwen.services.notifications import create_notification
from klasmwen.services.pagination import SortKey, build_page
from klasmwen.services.posts import get_post_or_404, reachable_comments

logger = logging.getLogger(__name__)

NEWEST_FIRST = [SortKey(Comment.created_at, descending=True)]
OLDEST_FIRST = [SortKey(Comment.created_at, descending=False)]


def _visible_comment_count(db: Session, post_id: str) -> int:
    return db.scalar(reachable_comments(func.count()).where(Comment.post_id == post_id)) or 0


def _reply_counts(db: Session, parent_ids: list[int]) -> dict[int, int]:
    if not parent_ids:
        return {}
    rows = db.execute(
        select(Comment.parent_id, func.count())
        .where(Comment.parent_id.in_(parent_ids), Comment.hidden.is_(False))
        .group_by(Comment.parent_id)
    ).all()
    return dict(rows)


def get_root_comments(
    db: Session,
    post_id: str,
    *,
    limit: int | None,
    cursor: int | None = None,
) -> RootCommentPage:
    """Return a post's visible root comments newest first.

    Each comment carries its visible reply count; the pagination block carries
    ``total_comments``, the number of visible comments on the whole post.
    """
    get_post_or_404(db, post_id)
    stmt = select(Comment).where(
        Comment.post_id == post_id,
        Comment.parent_id.is_(None),
        Comment.hidden.is_(False),
    )
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Comment.id,
        order_by=NEWEST_FIRST,
    )
    counts = _reply_counts(db, [comment.id for comment in page.items])
    return RootCommentPage(
        data=[
            RootCommentOut.model_validate(comment).model_copy(
                update={"reply_count": counts.get(comment.id, 0)}
            )
            for comment in page.items
        ],
        pagination=RootCommentPagination.for_page(
            page,
            total_comments=_visible_comment_count(db, post_id),
        ),
    )


def get_replies(
    db: Session,
    parent_id: int,
    *,
    limit: int | None,
    cursor: int | None = None,
) -> CursorEnvelope[ReplyOut]:
    """Return the visible replies of a root comment in chronological order.

    Raises:
        CommentNotFoundError: The comment is missing or hidden.
        PostNotFoundError: The comment's post is missing or hidden.
        ValidationError: ``parent_id`` names a reply; replies have no replies.
    """
    parent = db.get(Comment, parent_id)
    if parent is None or parent.hidden:
        raise CommentNotFoundError()
    get_post_or_404(db, parent.post_id)
    if not parent.is_root:
        raise ValidationError(
            errors=[{"path": "commentId", "message": "Replies are listed under their root comment"}],
        )
    stmt = select(Comment).where(Comment.parent_id == parent_id, Comment.hidden.is_(False))
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Comment.id,
        order_by=OLDEST_FIRST,
    )
    return CursorEnvelope[ReplyOut](
        data=[ReplyOut.model_validate(comment) for comment in page.items],
        pagination=CursorPagination.for_page(page),
    )


def create_comment(
    db: Session,
    author: User,
    post_id: str,
    content: str,
    parent_id: int | None = None,
) -> CommentOut:
    """Create a root comment or a reply.

    Raises:
        PostNotFoundError: The post is missing or hidden.
        CommentNotFoundError: ``parent_id`` names no comment.
        CommentPostMismatchError: The parent comment belongs to another post.
    """
    post = get_post_or_404(db, post_id)
    assert_permission(author, "comments", "create")

    root_id: int | None = None
    mentioned_user_id: str | None = None
    parent: Comment | None = None
    if parent_id is not None:
        parent = db.get(Comment, parent_id)
        if parent is None:
            raise CommentNotFoundError("Parent comment not found")
        if parent.post_id != post.id:
            raise CommentPostMismatchError()
        if parent.parent_id is None:
            root_id = parent.id
        else:
            # Replies to replies hang off the same root.
            root_id = parent.parent_id
            mentioned_user_id = parent.author_id

    comment = Comment(
        content=content,
        author_id=author.id,
        post_id=post.id,
        parent_id=root_id,
        mentioned_user_id=mentioned_user_id,
    )
    db.add(comment)
    db.flush()

    if parent is not None:
        create_notification(
            db,
            user_id=parent.author_id,
            actor_id=author.id,
            type=NotificationType.REPLY,
            post_id=post.id,
            comment_id=comment.id,
        )
    else:
        create_notification(
            db,
            user_id=post.author_id,
            actor_id=author.id,
            type=NotificationType.COMMENT,
            post_id=post.id,
            comment_id=comment.id,
        )

    db.commit()
    db.refresh(comment)
    logger.info(
        "User %s commented %s on post %s (parent=%s)",
        author.id,
        comment.id,
        post.id,
        comment.parent_id,
    )
    return CommentOut.model_validate(comment)


def delete_comment(db: Session, user: User, comment_id: int) -> None:
    """Delete a comment; deleting a root comment removes its replies too."""
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise CommentNotFoundError()
    assert_permission(user, "comments", "delete", comment)

    reply_count = len(comment.replies)
    db.delete(comment)
    db.commit()
    logger.info(
        "User %s deleted comment %s with %d replies",
        user.id,
        comment_id,
        reply_count,
    )


def get_user_comments(
    db: Session,
    user_id: str,
    *,
    limit: int | None,
    cursor: int | None = None,
) -> CursorEnvelope[UserCommentOut]:
    """Return a user's visible comments on visible posts, newest first."""
    if db.get(User, user_id) is None:
        raise UserNotFoundError()
    stmt = (
        reachable_comments(Comment)
        .join(Post, Comment.post_id == Post.id)
        .where(Comment.author_id == user_id, Post.hidden.is_(False))
    )
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Comment.id,
        order_by=NEWEST_FIRST,
    )
    return CursorEnvelope[UserCommentOut](
        data=[
            UserCommentOut.model_validate(
                {
                    **CommentOut.model_validate(comment).model_dump(),
                    "post": PostSummary.model_validate(comment.post),
                    "is_reply": comment.parent_id is not None,
                }
            )
            for comment in page.items
        ],
        pagination=CursorPagination.for_page(page),
    )
