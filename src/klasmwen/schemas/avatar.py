"""Avatar catalogue schemas."""
from __future__ import annotations

from pydantic import Field

from klasmwen.schemas.common import APIModel


class AvatarCreate(APIModel):
    url: str = Field(..., min_length=1, max_length=2048)
    is_default: bool = False


class AvatarOut(APIModel):
    id: int
    url: str
    is_default: bool


class AvatarBatchResponse(APIModel):
    message: str = "Avatar(s) added successfully"
    count: int
    data: list[AvatarOut]
