"""SQLAlchemy model for the avatar catalogue."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from klasmwen.db.session import Base


class Avatar(Base):
    """Profile picture users pick from.

    Default avatars are handed out at random to new accounts; the others are
    the catalogue users choose from when editing their profile.
    """

    __tablename__ = "avatars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
