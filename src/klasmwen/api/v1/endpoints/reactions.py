# src/klasmwen/api/v1/endpoints/reactions.py
"""Like endpoints."""

from uuid import UUID

from fastapi import APIRouter

from klasmwen.api.v1.dependencies import CurrentUserDep, SessionDep
from klasmwen.schemas.post import LikeToggleResponse
from klasmwen.services import reactions as reaction_service

router = APIRouter(tags=["likes"])


@router.post("/posts/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: UUID,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LikeToggleResponse:
    """Like a post, or remove an existing like."""
    liked = reaction_service.toggle_like(db, current_user, str(post_id))
    message = "Post liked successfully" if liked else "Post unliked successfully"
    return LikeToggleResponse(message=message, liked=liked)
