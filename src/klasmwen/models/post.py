"""SQLAlchemy models for posts and related attributes."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klasmwen.db.session import Base
from klasmwen.db.time import utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .notification import Notification
    from .reaction import Bookmark, Like
    from .report import Report
    from .tag import Tag
    from .user import User


class PostType(str, enum.Enum):
    """Kinds of posts students can publish."""

    QUESTION = "QUESTION"
    NOTE = "NOTE"
    RESOURCE = "RESOURCE"


class Post(Base):
    """Primary content entity produced by users.

    Feeds are ordered by ``created_at`` with ``id`` as the cursor field.
    ``hidden`` is owned by the moderation workflow; hidden posts drop out of
    every public listing.
    """

    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_created_at_id", "created_at", "id"),)

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[PostType] = mapped_column(Enum(PostType, name="post_type"), nullable=False)
    # Resource metadata; the upload itself happens outside this service.
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary="post_tags",
        back_populates="posts",
        lazy="selectin",
        order_by="Tag.name",
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    likes: Mapped[list[Like]] = relationship(
        "Like",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    bookmarks: Mapped[list[Bookmark]] = relationship(
        "Bookmark",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    reports: Mapped[list[Report]] = relationship(
        "Report",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    notifications: Mapped[list[Notification]] = relationship(
        "Notification",
        back_populates="post",
        cascade="all, delete-orphan",
    )
