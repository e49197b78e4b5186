"""Models tracking user reports and the reasons offered for them."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klasmwen.db.session import Base
from klasmwen.db.time import utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .post import Post
    from .user import User


class ReportStatus(str, enum.Enum):
    """Moderation status of a report.

    Every status can be written at any time; who may write it is decided by
    role, not by a transition table.
    """

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    DISMISSED = "DISMISSED"


class ReportReason(Base):
    """Reason catalogue presented to users when they file a report."""

    __tablename__ = "report_reasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    label: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Report(Base):
    """A user's report against exactly one post or one comment."""

    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_reports_single_target",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reporter_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    reason_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("report_reasons.id"),
        nullable=False,
    )
    post_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    comment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status"),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True,
    )
    moderator_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    reporter: Mapped[User] = relationship("User", lazy="joined")
    reason: Mapped[ReportReason] = relationship("ReportReason", lazy="joined")
    post: Mapped[Post | None] = relationship("Post", back_populates="reports", lazy="joined")
    comment: Mapped[Comment | None] = relationship(
        "Comment",
        back_populates="reports",
        lazy="joined",
    )
