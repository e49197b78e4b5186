"""Post services: creation, feeds, edits and removal."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from klasmwen.core.errors import PostNotFoundError, UserNotFoundError, ValidationError
from klasmwen.core.policy import assert_permission
from klasmwen.models import Comment, Like, Post, PostType, Tag, User
from klasmwen.schemas.common import CursorEnvelope, CursorPagination
from klasmwen.schemas.post import PostCreate, PostOut, PostSearchPage, PostUpdate, SearchMeta
from klasmwen.services.pagination import CursorPage, SortKey, build_page
from klasmwen.services.tags import resolve_tags

logger = logging.getLogger(__name__)

FEED_ORDER = [SortKey(Post.created_at, descending=True)]

_ROOT = aliased(Comment, name="root_comment")


def reachable_comments(*columns):
    """Select visible comments whose root comment, if any, is visible too."""
    return (
        select(*columns)
        .select_from(Comment)
        .outerjoin(_ROOT, Comment.parent_id == _ROOT.id)
        .where(
            Comment.hidden.is_(False),
            or_(Comment.parent_id.is_(None), _ROOT.hidden.is_(False)),
        )
    )


def get_post_or_404(db: Session, post_id: str, *, include_hidden: bool = False) -> Post:
    """Load a post, treating hidden posts as missing unless asked otherwise."""
    post = db.get(Post, post_id)
    if post is None or (post.hidden and not include_hidden):
        raise PostNotFoundError()
    return post


def serialize_posts(db: Session, posts: Sequence[Post]) -> list[PostOut]:
    """Convert posts to API schemas with like and visible comment counts."""
    if not posts:
        return []
    ids = [post.id for post in posts]
    like_counts = dict(
        db.execute(
            select(Like.post_id, func.count())
            .where(Like.post_id.in_(ids))
            .group_by(Like.post_id)
        ).all()
    )
    comment_counts = dict(
        db.execute(
            reachable_comments(Comment.post_id, func.count())
            .where(Comment.post_id.in_(ids))
            .group_by(Comment.post_id)
        ).all()
    )
    return [
        PostOut.model_validate(post).model_copy(
            update={
                "like_count": like_counts.get(post.id, 0),
                "comment_count": comment_counts.get(post.id, 0),
            }
        )
        for post in posts
    ]


def to_envelope(db: Session, page: CursorPage[Post]) -> CursorEnvelope[PostOut]:
    return CursorEnvelope[PostOut](
        data=serialize_posts(db, page.items),
        pagination=CursorPagination.for_page(page),
    )


def create_post(db: Session, author: User, payload: PostCreate) -> PostOut:
    assert_permission(author, "posts", "create")
    post = Post(
        title=payload.title,
        content=payload.content,
        type=payload.type,
        file_url=payload.file_url,
        file_name=payload.file_name,
        author_id=author.id,
        tags=resolve_tags(db, payload.tag_ids),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("User %s created %s post %s", author.id, post.type.value, post.id)
    return serialize_posts(db, [post])[0]


def get_post(db: Session, post_id: str) -> PostOut:
    return serialize_posts(db, [get_post_or_404(db, post_id)])[0]


def list_posts(
    db: Session,
    *,
    limit: int | None,
    cursor: str | None = None,
    post_type: PostType | None = None,
) -> CursorEnvelope[PostOut]:
    """Return the public feed: visible posts, newest first."""
    stmt = select(Post).where(Post.hidden.is_(False))
    if post_type is not None:
        stmt = stmt.where(Post.type == post_type)
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Post.id,
        order_by=FEED_ORDER,
    )
    return to_envelope(db, page)


def list_user_posts(
    db: Session,
    user_id: str,
    *,
    limit: int | None,
    cursor: str | None = None,
) -> CursorEnvelope[PostOut]:
    if db.get(User, user_id) is None:
        raise UserNotFoundError()
    stmt = select(Post).where(Post.author_id == user_id, Post.hidden.is_(False))
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Post.id,
        order_by=FEED_ORDER,
    )
    return to_envelope(db, page)


def update_post(db: Session, user: User, post_id: str, payload: PostUpdate) -> PostOut:
    post = get_post_or_404(db, post_id, include_hidden=True)
    assert_permission(user, "posts", "update", post)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "tag_ids" in changes:
        post.tags = resolve_tags(db, changes["tag_ids"])
    for field_name, value in changes.items():
        if field_name != "tag_ids":
            setattr(post, field_name, value)
    db.commit()
    db.refresh(post)
    logger.info("User %s updated post %s (%s)", user.id, post.id, ", ".join(changes) or "no changes")
    return serialize_posts(db, [post])[0]


def delete_post(db: Session, user: User, post_id: str) -> None:
    """Delete a post with its comments, likes, bookmarks, reports and notifications."""
    post = get_post_or_404(db, post_id, include_hidden=True)
    assert_permission(user, "posts", "delete", post)
    db.delete(post)
    db.commit()
    logger.info("User %s deleted post %s", user.id, post_id)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_posts(
    db: Session,
    *,
    query: str | None,
    tag_ids: Sequence[int] = (),
    limit: int | None,
    cursor: str | None = None,
) -> PostSearchPage:
    """Search visible posts by title or content and/or by tag, newest first.

    A post matches when the term occurs in its title or content
    (case-insensitive) and, if tags are given, when it carries any of them.

    Raises:
        ValidationError: Neither a search term nor a tag was given.
    """
    term = " ".join(query.split()) if query else ""
    if not term and not tag_ids:
        raise ValidationError(
            errors=[{"path": "search", "message": "Provide a search term or at least one tag"}],
        )
    stmt = select(Post).where(Post.hidden.is_(False))
    if term:
        pattern = f"%{_escape_like(term)}%"
        stmt = stmt.where(
            or_(Post.title.ilike(pattern, escape="\\"), Post.content.ilike(pattern, escape="\\"))
        )
    if tag_ids:
        stmt = stmt.where(Post.tags.any(Tag.id.in_(list(tag_ids))))

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Post.id,
        order_by=FEED_ORDER,
    )
    logger.debug("Search %r tags=%s matched %d posts", term, list(tag_ids), total)
    return PostSearchPage(
        data=serialize_posts(db, page.items),
        pagination=CursorPagination.for_page(page, total_items=total),
        meta=SearchMeta(
            search_term=term or None,
            results_found=total,
            current_page_size=len(page.items),
        ),
    )
