# src/klasmwen/api/v1/endpoints/posts.py
"""Post-related endpoints for the KlasMwen API."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from klasmwen.api.v1.dependencies import (
    CurrentUserDep,
    IdCursorDep,
    LimitDep,
    PostCursorDep,
    SessionDep,
)
from klasmwen.models import PostType
from klasmwen.schemas.comment import CommentCreate, CommentOut, RootCommentPage
from klasmwen.schemas.common import CursorEnvelope, MessageResponse
from klasmwen.schemas.post import PostCreate, PostOut, PostUpdate
from klasmwen.services import comments as comment_service
from klasmwen.services import posts as post_service

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=CursorEnvelope[PostOut])
async def list_posts(
    db: SessionDep,
    limit: LimitDep,
    cursor: PostCursorDep,
    type: PostType | None = Query(None, description="Only posts of this type"),
) -> CursorEnvelope[PostOut]:
    """Return visible posts, newest first."""
    return post_service.list_posts(
        db,
        limit=limit,
        cursor=cursor,
        post_type=type,
    )


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostOut:
    return post_service.create_post(db, current_user, payload)


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: UUID, db: SessionDep) -> PostOut:
    """Get a specific post by ID; hidden posts are reported as missing."""
    return post_service.get_post(db, str(post_id))


@router.put("/{post_id}", response_model=PostOut)
async def update_post(
    post_id: UUID,
    payload: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostOut:
    return post_service.update_post(db, current_user, str(post_id), payload)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: UUID,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    post_service.delete_post(db, current_user, str(post_id))
    return MessageResponse(message="Post deleted successfully")


@router.get("/{post_id}/comments", response_model=RootCommentPage)
async def list_root_comments(
    post_id: UUID,
    db: SessionDep,
    limit: LimitDep,
    cursor: IdCursorDep,
) -> RootCommentPage:
    """Return root comments with reply counts and the post's comment total."""
    return comment_service.get_root_comments(db, str(post_id), limit=limit, cursor=cursor)


@router.post(
    "/{post_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: UUID,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentOut:
    """Comment on a post, or reply to a comment when ``parentId`` is given."""
    return comment_service.create_comment(
        db,
        current_user,
        str(post_id),
        payload.content,
        parent_id=payload.parent_id,
    )
