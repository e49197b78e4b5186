"""Report and moderation workflow.

Reports move between PENDING, REVIEWED and DISMISSED without a transition
table; any status may be written at any time and only the moderation role
guard decides who may write it. Hiding content is a separate operation on the
post or comment itself and is what ``is_content_hidden`` reflects when a
report is read back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from klasmwen.core.errors import (
    CommentNotFoundError,
    PostNotFoundError,
    ReportNotFoundError,
    ReportReasonNotFoundError,
    ValidationError,
)
from klasmwen.core.policy import assert_permission
from klasmwen.core.settings import settings
from klasmwen.db.time import as_utc, utcnow
from klasmwen.models import Comment, Post, Report, ReportReason, ReportStatus, User
from klasmwen.schemas.common import OffsetEnvelope, OffsetPagination
from klasmwen.schemas.report import (
    ReportedComment,
    ReportedPost,
    ReportOut,
    ReportReasonOut,
    ReportStats,
    ResourceType,
)
from klasmwen.schemas.user import UserSummary
from klasmwen.services.pagination import SortKey, build_offset_page

logger = logging.getLogger(__name__)

REPORT_ORDER = [SortKey(Report.created_at), SortKey(Report.id)]


@dataclass
class ReportFilters:
    """Optional filters of the moderation queue; ``date_to`` is inclusive."""

    status: ReportStatus | None = None
    reason_id: int | None = None
    post_id: str | None = None
    comment_id: int | None = None
    date_from: date | None = None
    date_to: date | None = None
    resource_type: ResourceType | None = None


def enrich_report(report: Report) -> ReportOut:
    """Attach ``content_type`` and ``is_content_hidden``.

    The target's own ``hidden`` flag is read here and left out of the nested
    post/comment payload.
    """
    if report.comment is not None:
        is_hidden = report.comment.hidden
    elif report.post is not None:
        is_hidden = report.post.hidden
    else:
        is_hidden = False

    return ReportOut(
        id=report.id,
        status=report.status,
        moderator_notes=report.moderator_notes,
        created_at=report.created_at,
        reporter=UserSummary.model_validate(report.reporter),
        reason=ReportReasonOut.model_validate(report.reason),
        post=ReportedPost.model_validate(report.post) if report.post is not None else None,
        comment=(
            ReportedComment.model_validate(report.comment) if report.comment is not None else None
        ),
        content_type="comment" if report.comment_id is not None else "post",
        is_content_hidden=is_hidden,
    )


def _get_report(db: Session, report_id: int) -> Report:
    report = db.get(Report, report_id)
    if report is None:
        raise ReportNotFoundError()
    return report


def create_report(
    db: Session,
    reporter: User,
    *,
    reason_id: int,
    post_id: str | None = None,
    comment_id: int | None = None,
) -> ReportOut:
    """File a PENDING report against exactly one post or comment.

    Raises:
        ValidationError: Both or neither of ``post_id``/``comment_id`` given.
        ReportReasonNotFoundError: The reason is unknown or inactive.
        PostNotFoundError / CommentNotFoundError: The target does not exist.
        PermissionDeniedError: The reporter authored the target.
    """
    if (post_id is None) == (comment_id is None):
        raise ValidationError(
            errors=[{"path": "postId", "message": "Provide exactly one of postId or commentId"}],
        )

    reason = db.get(ReportReason, reason_id)
    if reason is None or not reason.active:
        raise ReportReasonNotFoundError()

    if post_id is not None:
        post = db.get(Post, post_id)
        if post is None:
            raise PostNotFoundError()
        assert_permission(reporter, "posts", "report", post)
    else:
        comment = db.get(Comment, comment_id)
        if comment is None:
            raise CommentNotFoundError()
        assert_permission(reporter, "comments", "report", comment)

    report = Report(
        reporter_id=reporter.id,
        reason_id=reason.id,
        post_id=post_id,
        comment_id=comment_id,
        status=ReportStatus.PENDING,
    )
    db.add(report)
    db.commit()
    logger.info(
        "User %s reported %s %s (reason=%s)",
        reporter.id,
        "post" if post_id is not None else "comment",
        post_id if post_id is not None else comment_id,
        reason.label,
    )

    if post_id is not None:
        auto_hide_content(db, "post", post_id)
    else:
        auto_hide_content(db, "comment", comment_id)

    db.refresh(report)
    return enrich_report(report)


def auto_hide_content(
    db: Session,
    resource_type: ResourceType,
    resource_id: str | int,
    *,
    threshold: int | None = None,
    grace_seconds: int | None = None,
) -> bool:
    """Hide a post or comment that collected enough non-dismissed reports.

    The target is hidden once it has at least ``threshold`` non-dismissed
    reports and the report that reached the threshold is at least
    ``grace_seconds`` old. Returns True when the target was hidden by this
    call.
    """
    threshold = settings.report_auto_hide_threshold if threshold is None else threshold
    grace_seconds = (
        settings.report_auto_hide_grace_seconds if grace_seconds is None else grace_seconds
    )
    column = Report.post_id if resource_type == "post" else Report.comment_id
    active = (column == resource_id, Report.status != ReportStatus.DISMISSED)

    count = db.scalar(select(func.count()).select_from(Report).where(*active)) or 0
    if count < threshold:
        return False

    reached_at = db.scalar(
        select(Report.created_at)
        .where(*active)
        .order_by(Report.created_at.asc(), Report.id.asc())
        .offset(threshold - 1)
        .limit(1)
    )
    if reached_at is None:
        return False
    if utcnow() - as_utc(reached_at) < timedelta(seconds=grace_seconds):
        logger.debug(
            "%s %s reached %d reports; inside grace period",
            resource_type,
            resource_id,
            count,
        )
        return False

    target = db.get(Post, resource_id) if resource_type == "post" else db.get(Comment, resource_id)
    if target is None or target.hidden:
        return False
    target.hidden = True
    db.commit()
    logger.info("Auto-hid %s %s after %d reports", resource_type, resource_id, count)
    return True


def list_reports(
    db: Session,
    filters: ReportFilters,
    *,
    page: int = 1,
    limit: int | None = None,
) -> OffsetEnvelope[ReportOut]:
    """Return the moderation queue newest first with offset pagination."""
    stmt = select(Report)
    if filters.status is not None:
        stmt = stmt.where(Report.status == filters.status)
    if filters.reason_id is not None:
        stmt = stmt.where(Report.reason_id == filters.reason_id)
    if filters.post_id is not None:
        stmt = stmt.where(Report.post_id == filters.post_id)
    if filters.comment_id is not None:
        stmt = stmt.where(Report.comment_id == filters.comment_id)
    if filters.date_from is not None:
        stmt = stmt.where(Report.created_at >= datetime.combine(filters.date_from, time.min, UTC))
    if filters.date_to is not None:
        end = datetime.combine(filters.date_to + timedelta(days=1), time.min, UTC)
        stmt = stmt.where(Report.created_at < end)
    if filters.resource_type == "post":
        stmt = stmt.where(Report.post_id.is_not(None))
    elif filters.resource_type == "comment":
        stmt = stmt.where(Report.comment_id.is_not(None))

    result = build_offset_page(db, stmt, page=page, limit=limit, order_by=REPORT_ORDER)
    return OffsetEnvelope[ReportOut](
        data=[enrich_report(report) for report in result.items],
        pagination=OffsetPagination(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
            has_next=result.has_next,
            has_previous=result.has_previous,
        ),
    )


def get_report(db: Session, report_id: int) -> ReportOut:
    return enrich_report(_get_report(db, report_id))


def update_report_status(
    db: Session,
    report_id: int,
    status: ReportStatus,
    moderator_notes: str | None = None,
) -> ReportOut:
    """Overwrite the report status; every status is reachable from every other."""
    report = _get_report(db, report_id)
    previous = report.status
    report.status = status
    if moderator_notes is not None:
        report.moderator_notes = moderator_notes
    db.commit()
    db.refresh(report)
    logger.info("Report %s status %s -> %s", report_id, previous.value, status.value)
    return enrich_report(report)


def toggle_visibility(
    db: Session,
    resource_type: ResourceType,
    resource_id: str | int,
    hidden: bool,
) -> Post | Comment:
    """Set the ``hidden`` flag of a post or comment directly."""
    target: Post | Comment | None
    if resource_type == "post":
        target = db.get(Post, str(resource_id))
        if target is None:
            raise PostNotFoundError()
    else:
        try:
            comment_id = int(resource_id)
        except (TypeError, ValueError) as err:
            raise ValidationError(
                errors=[{"path": "resourceId", "message": "Comment id must be an integer"}],
            ) from err
        target = db.get(Comment, comment_id)
        if target is None:
            raise CommentNotFoundError()

    target.hidden = hidden
    db.commit()
    logger.info("%s %s hidden=%s", resource_type.capitalize(), resource_id, hidden)
    return target


def delete_report(db: Session, report_id: int) -> None:
    """Hard-delete a report; the reported content keeps its hidden state."""
    report = _get_report(db, report_id)
    db.delete(report)
    db.commit()
    logger.info("Deleted report %s", report_id)


def get_report_reasons(db: Session) -> list[ReportReason]:
    return list(
        db.scalars(
            select(ReportReason).where(ReportReason.active.is_(True)).order_by(ReportReason.id)
        ).all()
    )


def get_report_stats(db: Session) -> ReportStats:
    def _count(model: type, *criteria: object) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return db.scalar(stmt) or 0

    return ReportStats(
        total_reports=_count(Report),
        pending=_count(Report, Report.status == ReportStatus.PENDING),
        reviewed=_count(Report, Report.status == ReportStatus.REVIEWED),
        dismissed=_count(Report, Report.status == ReportStatus.DISMISSED),
        hidden_content=_count(Post, Post.hidden.is_(True)) + _count(Comment, Comment.hidden.is_(True)),
    )
