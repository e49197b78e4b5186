"""SQLAlchemy models for platform accounts."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klasmwen.db.session import Base
from klasmwen.db.time import utcnow

if TYPE_CHECKING:
    from .avatar import Avatar


class Role(str, enum.Enum):
    """Account roles understood by the permission policy."""

    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    STUDENT = "STUDENT"
    GUEST = "GUEST"


class User(Base):
    """Account identity; the `{id, role}` pair drives every permission check."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role"),
        nullable=False,
        default=Role.STUDENT,
    )
    bio: Mapped[str | None] = mapped_column(String(160), nullable=True)
    avatar_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("avatars.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    avatar: Mapped[Avatar | None] = relationship("Avatar", lazy="joined")

    @property
    def is_moderator(self) -> bool:
        """Return True for roles allowed into the moderation workflow."""
        return self.role in (Role.ADMIN, Role.MODERATOR)
