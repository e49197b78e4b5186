# src/klasmwen/api/v1/endpoints/bookmarks.py
"""Bookmark endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from klasmwen.api.v1.dependencies import CurrentUserDep, LimitDep, PostCursorDep, SessionDep
from klasmwen.schemas.common import CursorEnvelope, MessageResponse
from klasmwen.schemas.post import PostOut
from klasmwen.services import bookmarks as bookmark_service

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("", response_model=CursorEnvelope[PostOut])
async def list_bookmarks(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: LimitDep,
    cursor: PostCursorDep,
) -> CursorEnvelope[PostOut]:
    return bookmark_service.get_bookmarks(
        db,
        current_user,
        limit=limit,
        cursor=cursor,
    )


@router.post(
    "/{post_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_bookmark(
    post_id: UUID,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    bookmark_service.create_bookmark(db, current_user, str(post_id))
    return MessageResponse(message="Post bookmarked successfully")


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_bookmark(
    post_id: UUID,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    bookmark_service.delete_bookmark(db, current_user, str(post_id))
    return MessageResponse(message="Bookmark removed successfully")
