"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from klasmwen.services.pagination import CursorPage, encode_cursor

T = TypeVar("T")


class APIModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(APIModel):
    message: str


class CursorPagination(APIModel):
    """Pagination block of cursor paged listings; ``next_cursor`` is an opaque token."""

    has_more: bool
    next_cursor: str | None = None
    total_items: int | None = None

    @classmethod
    def for_page(cls, page: CursorPage[Any], **extra: Any):
        """Build the block for ``page``, encoding its raw cursor value."""
        token = None if page.next_cursor is None else encode_cursor(page.next_cursor)
        return cls(has_more=page.has_more, next_cursor=token, **extra)


class CursorEnvelope(APIModel, Generic[T]):
    data: list[T]
    pagination: CursorPagination


class OffsetPagination(APIModel):
    """Pagination block of offset paged listings (moderation queue)."""

    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_previous: bool


class OffsetEnvelope(APIModel, Generic[T]):
    data: list[T]
    pagination: OffsetPagination
