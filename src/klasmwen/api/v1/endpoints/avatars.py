# src/klasmwen/api/v1/endpoints/avatars.py
"""Avatar catalogue endpoints."""

from fastapi import APIRouter, Body, Path, status

from klasmwen.api.v1.dependencies import AdminDep, IdCursorDep, LimitDep, SessionDep
from klasmwen.schemas.avatar import AvatarBatchResponse, AvatarCreate, AvatarOut
from klasmwen.schemas.common import CursorEnvelope, MessageResponse
from klasmwen.services import users as user_service

router = APIRouter(prefix="/avatars", tags=["avatars"])


@router.get("/available", response_model=CursorEnvelope[AvatarOut])
async def list_available_avatars(
    db: SessionDep,
    limit: LimitDep,
    cursor: IdCursorDep,
) -> CursorEnvelope[AvatarOut]:
    """Return the avatars users can pick for their profile; no login needed."""
    return user_service.list_available_avatars(db, limit=limit, cursor=cursor)


@router.get("", response_model=CursorEnvelope[AvatarOut])
async def list_avatars(
    admin: AdminDep,
    db: SessionDep,
    limit: LimitDep,
    cursor: IdCursorDep,
) -> CursorEnvelope[AvatarOut]:
    return user_service.list_avatars(db, limit=limit, cursor=cursor)


@router.post("", response_model=AvatarBatchResponse, status_code=status.HTTP_201_CREATED)
async def add_avatars(
    admin: AdminDep,
    db: SessionDep,
    payload: AvatarCreate | list[AvatarCreate] = Body(...),
) -> AvatarBatchResponse:
    """Add one avatar or a batch of them."""
    payloads = payload if isinstance(payload, list) else [payload]
    avatars = user_service.add_avatars(db, payloads)
    return AvatarBatchResponse(
        count=len(avatars),
        data=[AvatarOut.model_validate(avatar) for avatar in avatars],
    )


@router.delete("/{avatar_id}", response_model=MessageResponse)
async def delete_avatar(
    admin: AdminDep,
    db: SessionDep,
    avatar_id: int = Path(..., ge=1),
) -> MessageResponse:
    user_service.delete_avatar(db, avatar_id)
    return MessageResponse(message="Avatar deleted successfully")
