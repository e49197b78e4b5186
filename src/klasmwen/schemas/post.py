"""Post-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from klasmwen.models.post import PostType
from klasmwen.schemas.common import APIModel, CursorPagination
from klasmwen.schemas.tag import TagOut
from klasmwen.schemas.user import UserSummary


class PostCreate(APIModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=5, max_length=100)
    content: str | None = Field(None, min_length=10, max_length=10000)
    type: PostType
    file_url: str | None = Field(None, max_length=2048, description="Uploaded resource location")
    file_name: str | None = Field(None, max_length=255)
    tag_ids: list[int] = Field(default_factory=list, max_length=10)

    @model_validator(mode="after")
    def _check_body(self) -> PostCreate:
        if self.type is PostType.RESOURCE:
            if not self.file_url:
                raise ValueError("Resource posts require a file URL")
        elif not self.content:
            raise ValueError("Content is required for questions and notes")
        return self


class PostUpdate(APIModel):
    title: str | None = Field(None, min_length=5, max_length=100)
    content: str | None = Field(None, min_length=10, max_length=10000)
    tag_ids: list[int] | None = Field(None, max_length=10, description="Replaces the post's tags")


class PostOut(APIModel):
    """Schema for post information returned by the API."""

    id: str
    title: str
    content: str | None
    type: PostType
    file_url: str | None = None
    file_name: str | None = None
    author: UserSummary
    tags: list[TagOut] = []
    created_at: datetime
    updated_at: datetime
    like_count: int = 0
    comment_count: int = 0


class PostSummary(APIModel):
    id: str
    title: str


class LikeToggleResponse(APIModel):
    message: str
    liked: bool


class SearchMeta(APIModel):
    search_term: str | None
    results_found: int
    current_page_size: int


class PostSearchPage(APIModel):
    """Search results: a cursor page plus what was searched for."""

    data: list[PostOut]
    pagination: CursorPagination
    meta: SearchMeta
