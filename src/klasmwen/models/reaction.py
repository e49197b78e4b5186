"""Models capturing likes and bookmarks on posts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klasmwen.db.session import Base
from klasmwen.db.time import utcnow

if TYPE_CHECKING:
    from .post import Post


class Like(Base):
    """Per-user like on a post.

    The composite primary key is the only guard against duplicate likes; a
    concurrent second insert is rejected by the database.
    """

    __tablename__ = "likes"
    __table_args__ = (Index("ix_likes_user_created", "user_id", "created_at"),)

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post: Mapped[Post] = relationship("Post", back_populates="likes")


class Bookmark(Base):
    """Per-user saved post, keyed like :class:`Like`."""

    __tablename__ = "bookmarks"
    __table_args__ = (Index("ix_bookmarks_user_created", "user_id", "created_at"),)

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post: Mapped[Post] = relationship("Post", back_populates="bookmarks")
