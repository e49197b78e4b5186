"""SQLAlchemy models for threaded comments."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klasmwen.db.session import Base
from klasmwen.db.time import utcnow

if TYPE_CHECKING:
    from .notification import Notification
    from .post import Post
    from .report import Report
    from .user import User


class Comment(Base):
    """Comment attached to a post.

    Storage is two-tier: root comments have ``parent_id = NULL`` and every
    reply, however deep in the conversation, points at the root. A reply to a
    reply is told apart by ``mentioned_user_id``, the author being answered.
    """

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_post_parent", "post_id", "parent_id"),
        Index("ix_comments_parent_created", "parent_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    mentioned_user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    author: Mapped[User] = relationship("User", foreign_keys=[author_id], lazy="joined")
    mentioned_user: Mapped[User | None] = relationship(
        "User",
        foreign_keys=[mentioned_user_id],
        lazy="joined",
    )
    post: Mapped[Post] = relationship("Post", back_populates="comments")
    parent: Mapped[Comment | None] = relationship(
        "Comment",
        remote_side=[id],
        back_populates="replies",
    )
    # Deleting a root comment removes its whole thread.
    replies: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="parent",
        cascade="all, delete-orphan",
    )
    reports: Mapped[list[Report]] = relationship(
        "Report",
        back_populates="comment",
        cascade="all, delete-orphan",
    )
    notifications: Mapped[list[Notification]] = relationship(
        "Notification",
        back_populates="comment",
        cascade="all, delete-orphan",
    )

    @property
    def is_root(self) -> bool:
        return self.parent_id is None
