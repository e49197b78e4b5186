# src/klasmwen/api/v1/endpoints/users.py
"""User profile endpoints."""

from uuid import UUID

from fastapi import APIRouter

from klasmwen.api.v1.dependencies import (
    CurrentUserDep,
    IdCursorDep,
    LimitDep,
    PostCursorDep,
    SessionDep,
)
from klasmwen.schemas.comment import UserCommentOut
from klasmwen.schemas.common import CursorEnvelope
from klasmwen.schemas.post import PostOut
from klasmwen.schemas.user import ProfileUpdate, ProfileUpdateResponse, UserOut, UserProfile
from klasmwen.services import comments as comment_service
from klasmwen.services import posts as post_service
from klasmwen.services import reactions as reaction_service
from klasmwen.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
async def read_me(current_user: CurrentUserDep) -> UserOut:
    return UserOut.model_validate(current_user)


@router.put("/me", response_model=ProfileUpdateResponse)
async def update_me(
    payload: ProfileUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ProfileUpdateResponse:
    """Edit the caller's bio and avatar."""
    user = user_service.update_profile(db, current_user, payload)
    return ProfileUpdateResponse(user=UserOut.model_validate(user))


@router.get("/me/likes", response_model=CursorEnvelope[PostOut])
async def list_my_likes(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: LimitDep,
    cursor: PostCursorDep,
) -> CursorEnvelope[PostOut]:
    """Return posts the caller liked, most recent like first."""
    return reaction_service.get_liked_posts(
        db,
        current_user.id,
        limit=limit,
        cursor=cursor,
    )


@router.get("/{user_id}", response_model=UserProfile)
async def read_user(user_id: UUID, db: SessionDep) -> UserProfile:
    return UserProfile.model_validate(user_service.get_user_or_404(db, str(user_id)))


@router.get("/{user_id}/posts", response_model=CursorEnvelope[PostOut])
async def list_user_posts(
    user_id: UUID,
    db: SessionDep,
    limit: LimitDep,
    cursor: PostCursorDep,
) -> CursorEnvelope[PostOut]:
    return post_service.list_user_posts(
        db,
        str(user_id),
        limit=limit,
        cursor=cursor,
    )


@router.get("/{user_id}/comments", response_model=CursorEnvelope[UserCommentOut])
async def list_user_comments(
    user_id: UUID,
    db: SessionDep,
    limit: LimitDep,
    cursor: IdCursorDep,
) -> CursorEnvelope[UserCommentOut]:
    return comment_service.get_user_comments(db, str(user_id), limit=limit, cursor=cursor)
