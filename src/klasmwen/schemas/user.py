"""User-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from klasmwen.models.user import Role
from klasmwen.schemas.avatar import AvatarOut
from klasmwen.schemas.common import APIModel


class UserSummary(APIModel):
    """Author/actor reference embedded in other payloads."""

    id: str
    username: str


class UserProfile(APIModel):
    """Public view of an account; never carries the email address."""

    id: str
    username: str
    role: Role
    bio: str | None = None
    avatar: AvatarOut | None = None
    created_at: datetime


class UserOut(UserProfile):
    """The caller's own account."""

    email: str


class ProfileUpdate(APIModel):
    """Profile edit; omitted or null fields stay as they are and an empty bio clears it."""

    bio: str | None = Field(None, max_length=160)
    avatar_id: int | None = Field(None, ge=1)


class ProfileUpdateResponse(APIModel):
    message: str = "Profile updated successfully"
    user: UserOut


class GuestLoginResponse(APIModel):
    """Token issued for a freshly created guest account."""

    message: str = "Guest session created"
    token: str = Field(..., description="Bearer access token")
    user: UserOut
