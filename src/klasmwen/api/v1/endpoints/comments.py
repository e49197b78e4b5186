# src/klasmwen/api/v1/endpoints/comments.py
"""Comment thread endpoints."""

from fastapi import APIRouter

from klasmwen.api.v1.dependencies import CurrentUserDep, IdCursorDep, LimitDep, SessionDep
from klasmwen.schemas.comment import ReplyOut
from klasmwen.schemas.common import CursorEnvelope, MessageResponse
from klasmwen.services import comments as comment_service

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}/replies", response_model=CursorEnvelope[ReplyOut])
async def list_replies(
    comment_id: int,
    db: SessionDep,
    limit: LimitDep,
    cursor: IdCursorDep,
) -> CursorEnvelope[ReplyOut]:
    """Return the replies of a root comment, oldest first."""
    return comment_service.get_replies(db, comment_id, limit=limit, cursor=cursor)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    comment_service.delete_comment(db, current_user, comment_id)
    return MessageResponse(message="Comment deleted successfully")
