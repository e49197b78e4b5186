"""Account services: public profiles, profile edits and the avatar catalogue."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from klasmwen.core.errors import (
    AvatarNotFoundError,
    ConflictError,
    UserNotFoundError,
    ValidationError,
)
from klasmwen.models import Avatar, User
from klasmwen.schemas.avatar import AvatarCreate, AvatarOut
from klasmwen.schemas.common import CursorEnvelope, CursorPagination
from klasmwen.schemas.user import ProfileUpdate
from klasmwen.services.pagination import SortKey, build_page

logger = logging.getLogger(__name__)

CATALOGUE_ORDER = [SortKey(Avatar.id, descending=False)]


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


def get_avatar_or_404(db: Session, avatar_id: int) -> Avatar:
    avatar = db.get(Avatar, avatar_id)
    if avatar is None:
        raise AvatarNotFoundError()
    return avatar


def update_profile(db: Session, user: User, payload: ProfileUpdate) -> User:
    """Apply a profile edit; an empty bio clears it.

    Raises:
        AvatarNotFoundError: ``avatar_id`` names no catalogue entry.
    """
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "avatar_id" in changes:
        user.avatar = get_avatar_or_404(db, changes["avatar_id"])
    if "bio" in changes:
        user.bio = changes["bio"].strip() or None
    db.commit()
    db.refresh(user)
    logger.info("User %s updated profile (%s)", user.id, ", ".join(changes) or "no changes")
    return user


def random_default_avatar(db: Session) -> Avatar | None:
    """Pick one of the default avatars, or None while the catalogue has none."""
    avatar = db.scalars(
        select(Avatar).where(Avatar.is_default.is_(True)).order_by(func.random()).limit(1)
    ).first()
    if avatar is None:
        logger.warning("No default avatars available; new account left without one")
    return avatar


def _avatar_page(
    db: Session, stmt: Select, *, limit: int | None, cursor: int | None
) -> CursorEnvelope[AvatarOut]:
    page = build_page(
        db,
        stmt,
        limit=limit,
        cursor=cursor,
        cursor_field=Avatar.id,
        order_by=CATALOGUE_ORDER,
    )
    return CursorEnvelope[AvatarOut](
        data=[AvatarOut.model_validate(avatar) for avatar in page.items],
        pagination=CursorPagination.for_page(page),
    )


def list_available_avatars(
    db: Session, *, limit: int | None, cursor: int | None = None
) -> CursorEnvelope[AvatarOut]:
    """Return the avatars users may choose; defaults are handed out, not picked."""
    stmt = select(Avatar).where(Avatar.is_default.is_(False))
    return _avatar_page(db, stmt, limit=limit, cursor=cursor)


def list_avatars(
    db: Session, *, limit: int | None, cursor: int | None = None
) -> CursorEnvelope[AvatarOut]:
    return _avatar_page(db, select(Avatar), limit=limit, cursor=cursor)


def add_avatars(db: Session, payloads: Sequence[AvatarCreate]) -> list[Avatar]:
    """Insert catalogue entries; a URL may only be registered once."""
    if not payloads:
        raise ValidationError(errors=[{"path": "body", "message": "At least one avatar is required"}])
    urls = [payload.url for payload in payloads]
    taken = set(db.scalars(select(Avatar.url).where(Avatar.url.in_(urls))).all())
    duplicates = sorted(taken | {url for url in urls if urls.count(url) > 1})
    if duplicates:
        raise ConflictError(f"Avatar already exists: {', '.join(duplicates)}")
    avatars = [Avatar(url=payload.url, is_default=payload.is_default) for payload in payloads]
    db.add_all(avatars)
    db.commit()
    logger.info("Added %d avatars", len(avatars))
    return avatars


def delete_avatar(db: Session, avatar_id: int) -> None:
    """Remove a catalogue entry; accounts using it fall back to no avatar."""
    avatar = get_avatar_or_404(db, avatar_id)
    for user in db.scalars(select(User).where(User.avatar_id == avatar.id)).all():
        user.avatar = None
    db.delete(avatar)
    db.commit()
    logger.info("Deleted avatar %s", avatar_id)
