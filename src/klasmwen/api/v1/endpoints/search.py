# src/klasmwen/api/v1/endpoints/search.py
"""Post search endpoint."""

from fastapi import APIRouter, Query

from klasmwen.api.v1.dependencies import CurrentUserDep, LimitDep, PostCursorDep, SessionDep
from klasmwen.schemas.post import PostSearchPage
from klasmwen.services import posts as post_service

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/posts", response_model=PostSearchPage)
async def search_posts(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: LimitDep,
    cursor: PostCursorDep,
    search: str | None = Query(
        None,
        min_length=2,
        max_length=100,
        description="Matched against titles and content",
    ),
    tag_ids: list[int] = Query([], alias="tagIds", description="Posts carrying any of these tags"),
) -> PostSearchPage:
    return post_service.search_posts(
        db,
        query=search,
        tag_ids=tag_ids,
        limit=limit,
        cursor=cursor,
    )
