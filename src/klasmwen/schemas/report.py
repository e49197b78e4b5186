"""Report and moderation Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from klasmwen.models.report import ReportStatus
from klasmwen.schemas.common import APIModel
from klasmwen.schemas.user import UserSummary

ResourceType = Literal["post", "comment"]


class ReportCreate(APIModel):
    """A report targets exactly one post or one comment."""

    reason_id: int = Field(..., ge=1)
    post_id: str | None = None
    comment_id: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def _exactly_one_target(self) -> ReportCreate:
        if (self.post_id is None) == (self.comment_id is None):
            raise ValueError("Provide exactly one of postId or commentId")
        return self


class ReportStatusUpdate(APIModel):
    status: ReportStatus
    moderator_notes: str | None = Field(None, max_length=1000)


class VisibilityUpdate(APIModel):
    resource_type: ResourceType
    resource_id: str = Field(..., min_length=1)
    hidden: bool


class VisibilityResponse(APIModel):
    message: str
    resource_type: ResourceType
    resource_id: str
    hidden: bool


class ReportReasonOut(APIModel):
    id: int
    label: str
    description: str | None = None


class ReportedPost(APIModel):
    id: str
    title: str
    author: UserSummary


class ReportedComment(APIModel):
    id: int
    content: str
    post_id: str
    author: UserSummary


class ReportOut(APIModel):
    """Report enriched with ``content_type`` and ``is_content_hidden``.

    The nested post/comment never carries its own ``hidden`` flag.
    """

    id: int
    status: ReportStatus
    moderator_notes: str | None = None
    created_at: datetime
    reporter: UserSummary
    reason: ReportReasonOut
    post: ReportedPost | None = None
    comment: ReportedComment | None = None
    content_type: ResourceType
    is_content_hidden: bool


class ReportStats(APIModel):
    total_reports: int
    pending: int
    reviewed: int
    dismissed: int
    hidden_content: int


class ReportStatusResponse(APIModel):
    message: str
    data: ReportOut
