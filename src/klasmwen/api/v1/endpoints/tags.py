# src/klasmwen/api/v1/endpoints/tags.py
"""Tag catalogue endpoints; reads need an account, edits need an admin."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from klasmwen.api.v1.dependencies import AdminDep, CurrentUserDep, SessionDep
from klasmwen.schemas.common import MessageResponse
from klasmwen.schemas.tag import PopularTagList, TagCreate, TagList, TagOut
from klasmwen.services import tags as tag_service

router = APIRouter(prefix="/tags", tags=["tags"])

TagId = Annotated[int, Path(ge=1, description="Tag id")]


@router.get("", response_model=TagList)
async def list_tags(current_user: CurrentUserDep, db: SessionDep) -> TagList:
    return TagList(data=[TagOut.model_validate(tag) for tag in tag_service.list_tags(db)])


@router.get("/popular", response_model=PopularTagList)
async def popular_tags(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(tag_service.POPULAR_TAGS_LIMIT, ge=1),
) -> PopularTagList:
    """Return the most used tags with their visible post counts."""
    return PopularTagList(data=tag_service.get_popular_tags(db, limit))


@router.get("/{tag_id}", response_model=TagOut)
async def get_tag(tag_id: TagId, admin: AdminDep, db: SessionDep) -> TagOut:
    return TagOut.model_validate(tag_service.get_tag(db, tag_id))


@router.post("", response_model=TagOut, status_code=status.HTTP_201_CREATED)
async def create_tag(payload: TagCreate, admin: AdminDep, db: SessionDep) -> TagOut:
    return TagOut.model_validate(tag_service.create_tag(db, payload))


@router.put("/{tag_id}", response_model=TagOut)
async def update_tag(
    tag_id: TagId,
    payload: TagCreate,
    admin: AdminDep,
    db: SessionDep,
) -> TagOut:
    return TagOut.model_validate(tag_service.update_tag(db, tag_id, payload))


@router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag(tag_id: TagId, admin: AdminDep, db: SessionDep) -> MessageResponse:
    tag_service.delete_tag(db, tag_id)
    return MessageResponse(message="Tag deleted successfully")
