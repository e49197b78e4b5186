"""Tag catalogue services: listing, popularity, admin edits and post tagging."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from klasmwen.core.errors import ConflictError, TagNotFoundError, ValidationError
from klasmwen.models import Post, Tag, post_tags
from klasmwen.schemas.tag import PopularTagOut, TagCreate
from klasmwen.services.pagination import clamp_limit

logger = logging.getLogger(__name__)

POPULAR_TAGS_LIMIT = 10


def list_tags(db: Session) -> list[Tag]:
    return list(db.scalars(select(Tag).order_by(Tag.name)).all())


def get_popular_tags(db: Session, limit: int | None = POPULAR_TAGS_LIMIT) -> list[PopularTagOut]:
    """Return the tags carried by the most visible posts, ties broken by name."""
    post_count = func.count(Post.id).label("post_count")
    stmt = (
        select(Tag.id, Tag.name, post_count)
        .outerjoin(post_tags, post_tags.c.tag_id == Tag.id)
        .outerjoin(Post, and_(Post.id == post_tags.c.post_id, Post.hidden.is_(False)))
        .group_by(Tag.id, Tag.name)
        .order_by(post_count.desc(), Tag.name)
        .limit(clamp_limit(limit))
    )
    return [
        PopularTagOut(id=tag_id, name=name, post_count=count)
        for tag_id, name, count in db.execute(stmt).all()
    ]


def get_tag(db: Session, tag_id: int) -> Tag:
    tag = db.get(Tag, tag_id)
    if tag is None:
        raise TagNotFoundError()
    return tag


def _ensure_name_free(db: Session, name: str, *, exclude_id: int | None = None) -> None:
    stmt = select(Tag.id).where(Tag.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Tag.id != exclude_id)
    if db.scalar(stmt) is not None:
        raise ConflictError(f"Tag '{name}' already exists")


def create_tag(db: Session, payload: TagCreate) -> Tag:
    _ensure_name_free(db, payload.name)
    tag = Tag(name=payload.name)
    db.add(tag)
    db.commit()
    logger.info("Created tag %s (%s)", tag.id, tag.name)
    return tag


def update_tag(db: Session, tag_id: int, payload: TagCreate) -> Tag:
    tag = get_tag(db, tag_id)
    _ensure_name_free(db, payload.name, exclude_id=tag.id)
    previous, tag.name = tag.name, payload.name
    db.commit()
    logger.info("Renamed tag %s from %s to %s", tag.id, previous, tag.name)
    return tag


def delete_tag(db: Session, tag_id: int) -> None:
    """Delete a tag; posts carrying it simply lose it."""
    tag = get_tag(db, tag_id)
    tag.posts.clear()
    db.delete(tag)
    db.commit()
    logger.info("Deleted tag %s", tag_id)


def resolve_tags(db: Session, tag_ids: Sequence[int]) -> list[Tag]:
    """Load the tags named by ``tag_ids``, rejecting any id that does not exist.

    Raises:
        ValidationError: At least one id is unknown.
    """
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []
    tags = list(db.scalars(select(Tag).where(Tag.id.in_(wanted)).order_by(Tag.name)).all())
    missing = sorted(set(wanted) - {tag.id for tag in tags})
    if missing:
        raise ValidationError(
            errors=[
                {"path": "tagIds", "message": f"Unknown tag ids: {', '.join(map(str, missing))}"}
            ],
        )
    return tags
