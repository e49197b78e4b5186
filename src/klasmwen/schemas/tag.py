"""Tag-related Pydantic schemas."""
from __future__ import annotations

import re

from pydantic import Field, field_validator

from klasmwen.schemas.common import APIModel

_LETTERS_AND_SPACES = re.compile(r"^[^\W\d_]+(?: [^\W\d_]+)*$")


def normalize_tag_name(name: str) -> str:
    """Trim, collapse inner whitespace and lower-case a tag name."""
    return " ".join(name.split()).lower()


class TagCreate(APIModel):
    """Tag name: one or two words of letters, stored normalized."""

    name: str = Field(..., min_length=2, max_length=30)

    @field_validator("name")
    @classmethod
    def _normalize(cls, value: str) -> str:
        name = normalize_tag_name(value)
        if len(name) < 2:
            raise ValueError("The tag name must be at least 2 characters")
        if not _LETTERS_AND_SPACES.match(name):
            raise ValueError("The tag name can only contain letters and spaces")
        if len(name.split(" ")) > 2:
            raise ValueError("The tag name must be one or two words only")
        return name


class TagOut(APIModel):
    id: int
    name: str


class PopularTagOut(TagOut):
    post_count: int


class TagList(APIModel):
    data: list[TagOut]


class PopularTagList(APIModel):
    data: list[PopularTagOut]
