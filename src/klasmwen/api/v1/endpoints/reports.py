# src/klasmwen/api/v1/endpoints/reports.py
"""Report and moderation endpoints.

Any authenticated user may file a report and read the reason catalogue; the
queue, statistics, status changes, visibility toggles and deletions require a
moderator or admin.
"""

from datetime import date

from fastapi import APIRouter, Query, status

from klasmwen.api.v1.dependencies import CurrentUserDep, ModeratorDep, SessionDep
from klasmwen.core.settings import settings
from klasmwen.models import ReportStatus
from klasmwen.schemas.common import MessageResponse, OffsetEnvelope
from klasmwen.schemas.report import (
    ReportCreate,
    ReportOut,
    ReportReasonOut,
    ReportStats,
    ReportStatusResponse,
    ReportStatusUpdate,
    ResourceType,
    VisibilityResponse,
    VisibilityUpdate,
)
from klasmwen.services import reports as report_service
from klasmwen.services.reports import ReportFilters

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReportOut:
    return report_service.create_report(
        db,
        current_user,
        reason_id=payload.reason_id,
        post_id=payload.post_id,
        comment_id=payload.comment_id,
    )


@router.get("/reasons", response_model=list[ReportReasonOut])
async def list_report_reasons(db: SessionDep) -> list[ReportReasonOut]:
    """Return the active report reasons."""
    return [ReportReasonOut.model_validate(reason) for reason in report_service.get_report_reasons(db)]


@router.get("", response_model=OffsetEnvelope[ReportOut])
async def list_reports(
    _: ModeratorDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.pagination_default_limit, ge=1),
    status: ReportStatus | None = Query(None),
    reason_id: int | None = Query(None, alias="reasonId"),
    post_id: str | None = Query(None, alias="postId"),
    comment_id: int | None = Query(None, alias="commentId"),
    date_from: date | None = Query(None, alias="dateFrom"),
    date_to: date | None = Query(None, alias="dateTo"),
    resource_type: ResourceType | None = Query(None, alias="resourceType"),
) -> OffsetEnvelope[ReportOut]:
    """Return the moderation queue, newest first."""
    filters = ReportFilters(
        status=status,
        reason_id=reason_id,
        post_id=post_id,
        comment_id=comment_id,
        date_from=date_from,
        date_to=date_to,
        resource_type=resource_type,
    )
    return report_service.list_reports(db, filters, page=page, limit=limit)


@router.get("/stats", response_model=ReportStats)
async def report_stats(_: ModeratorDep, db: SessionDep) -> ReportStats:
    return report_service.get_report_stats(db)


@router.patch("/visibility", response_model=VisibilityResponse)
async def toggle_visibility(
    payload: VisibilityUpdate,
    _: ModeratorDep,
    db: SessionDep,
) -> VisibilityResponse:
    """Hide or unhide the post or comment a report points at."""
    report_service.toggle_visibility(db, payload.resource_type, payload.resource_id, payload.hidden)
    action = "hid" if payload.hidden else "unhid"
    return VisibilityResponse(
        message=f"Successfully {action} {payload.resource_type}",
        resource_type=payload.resource_type,
        resource_id=payload.resource_id,
        hidden=payload.hidden,
    )


@router.get("/{report_id}", response_model=ReportOut)
async def get_report(report_id: int, _: ModeratorDep, db: SessionDep) -> ReportOut:
    return report_service.get_report(db, report_id)


@router.patch("/{report_id}/status", response_model=ReportStatusResponse)
async def update_report_status(
    report_id: int,
    payload: ReportStatusUpdate,
    _: ModeratorDep,
    db: SessionDep,
) -> ReportStatusResponse:
    report = report_service.update_report_status(
        db,
        report_id,
        payload.status,
        payload.moderator_notes,
    )
    return ReportStatusResponse(message="Report status updated successfully", data=report)


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(report_id: int, _: ModeratorDep, db: SessionDep) -> MessageResponse:
    report_service.delete_report(db, report_id)
    return MessageResponse(message="Report deleted successfully")
