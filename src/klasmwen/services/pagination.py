"""Cursor and offset pagination over SQLAlchemy ``select`` statements.

Two strategies live side by side:

* cursor (keyset) pages for feeds, where rows keep arriving and offsets would
  drift. The caller passes the value of the cursor field of the last row it
  saw; the next page holds the rows strictly after that row in the requested
  order. ``limit + 1`` rows are fetched so ``has_more`` needs no count query.
* offset pages for the moderation queue, where moderators need exact totals
  and page jumps.

Services work with raw cursor values (a post id, a comment id). At the HTTP
boundary they travel as opaque url-safe base64 tokens, see ``encode_cursor``
and ``decode_cursor``. Tokens are not signed.
"""

from __future__ import annotations

import base64
import binascii
import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from klasmwen.core.errors import ValidationError
from klasmwen.core.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SortKey:
    """One ordering column; ``descending`` flips both ORDER BY and the keyset comparison."""

    column: Any
    descending: bool = True

    def order_clause(self) -> ColumnElement[Any]:
        return self.column.desc() if self.descending else self.column.asc()

    def after(self, value: Any) -> ColumnElement[bool]:
        return self.column < value if self.descending else self.column > value


@dataclass
class CursorPage(Generic[T]):
    items: list[T]
    has_more: bool
    next_cursor: Any = None
    total_items: int | None = None


@dataclass
class OffsetPage(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def encode_cursor(value: Any) -> str:
    """Wrap a raw cursor value into an opaque token."""
    return base64.urlsafe_b64encode(str(value).encode()).decode().rstrip("=")


def decode_cursor(token: str, parse: Callable[[str], T]) -> T:
    """Unwrap a token from ``encode_cursor`` and parse the raw value.

    Raises:
        ValidationError: The token is not base64 or ``parse`` rejects its content.
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode()).decode()
        return parse(raw)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        logger.debug("Rejected cursor %r: %s", token, exc)
        raise ValidationError(
            errors=[{"path": "cursor", "message": "Cursor is malformed"}],
        ) from exc


def clamp_limit(limit: int | None) -> int:
    """Validate a requested page size and cap it at the configured maximum."""
    if limit is None:
        return settings.pagination_default_limit
    if limit < 1:
        raise ValidationError(
            errors=[{"path": "limit", "message": "Limit must be a positive integer"}],
        )
    return min(limit, settings.pagination_max_limit)


def _keyset_predicate(keys: Sequence[SortKey], values: Sequence[Any]) -> ColumnElement[bool]:
    """Build ``(k1, k2, ...) > (v1, v2, ...)`` lexicographically, honoring each direction."""
    clauses = []
    for index, key in enumerate(keys):
        equalities = [keys[i].column == values[i] for i in range(index)]
        clauses.append(and_(*equalities, key.after(values[index])))
    return or_(*clauses)


def _full_order(order_by: Sequence[SortKey], tie_break: Sequence[Any]) -> list[SortKey]:
    keys = list(order_by)
    descending = keys[-1].descending if keys else True
    present = {id(key.column) for key in keys}
    for column in tie_break:
        if id(column) not in present:
            keys.append(SortKey(column, descending))
    return keys


def _fetch(
    db: Session,
    stmt: Select[Any],
    keys: Sequence[SortKey],
    cursor_row: Sequence[Any] | None,
    limit: int,
) -> tuple[list[Any], bool]:
    if cursor_row is not None:
        stmt = stmt.where(_keyset_predicate(keys, cursor_row))
    stmt = stmt.order_by(*(key.order_clause() for key in keys)).limit(limit + 1)
    rows = list(db.scalars(stmt).all())
    has_more = len(rows) > limit
    return rows[:limit], has_more


def build_page(
    db: Session,
    stmt: Select[Any],
    *,
    limit: int | None,
    cursor: Any = None,
    cursor_field: Any,
    order_by: Sequence[SortKey] = (),
) -> CursorPage[Any]:
    """Return one keyset page of ``stmt``.

    Args:
        db: Active session.
        stmt: ``select(Model)`` carrying the base filter.
        limit: Requested page size; validated and capped.
        cursor: Value of ``cursor_field`` of the last row already seen.
        cursor_field: Unique column exposed as ``next_cursor``; also the final tie-break.
        order_by: Display order. Defaults to ``cursor_field`` descending.

    Returns:
        CursorPage with at most ``limit`` rows.
    """
    size = clamp_limit(limit)
    keys = _full_order(order_by or [SortKey(cursor_field)], [cursor_field])

    cursor_row = None
    if cursor is not None:
        cursor_row = db.execute(
            select(*(key.column for key in keys)).where(cursor_field == cursor)
        ).first()
        if cursor_row is None:
            logger.debug("Cursor %r matched no row; returning an empty page", cursor)
            return CursorPage(items=[], has_more=False, next_cursor=None)

    items, has_more = _fetch(db, stmt, keys, cursor_row, size)
    next_cursor = getattr(items[-1], cursor_field.key) if has_more and items else None
    return CursorPage(items=items, has_more=has_more, next_cursor=next_cursor)


def build_compound_cursor_page(
    db: Session,
    stmt: Select[Any],
    *,
    limit: int | None,
    cursor_key: Mapping[Any, Any] | None,
    order_by: Sequence[SortKey],
    cursor_value: Callable[[Any], Any],
) -> CursorPage[Any]:
    """Return one keyset page where the cursor row is found through a composite key.

    ``cursor_key`` maps each column of the composite unique key to its value,
    for example ``{Like.user_id: user_id, Like.post_id: cursor}``, and is None
    for the first page. ``order_by`` must end in columns that make the order
    total within ``stmt``. ``cursor_value`` extracts the value exposed as
    ``next_cursor`` from the last row of the page.
    """
    size = clamp_limit(limit)
    keys = list(order_by)

    cursor_row = None
    if cursor_key:
        lookup = and_(*(column == value for column, value in cursor_key.items()))
        cursor_row = db.execute(select(*(key.column for key in keys)).where(lookup)).first()
        if cursor_row is None:
            logger.debug("Compound cursor %r matched no row; returning an empty page", cursor_key)
            return CursorPage(items=[], has_more=False, next_cursor=None)

    items, has_more = _fetch(db, stmt, keys, cursor_row, size)
    next_cursor = cursor_value(items[-1]) if has_more and items else None
    return CursorPage(items=items, has_more=has_more, next_cursor=next_cursor)


def build_offset_page(
    db: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int | None,
    order_by: Sequence[SortKey] = (),
) -> OffsetPage[Any]:
    """Return page ``page`` (1-based) of ``stmt`` together with the total row count."""
    if page < 1:
        raise ValidationError(
            errors=[{"path": "page", "message": "Page must be a positive integer"}],
        )
    size = clamp_limit(limit)

    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    if order_by:
        stmt = stmt.order_by(*(key.order_clause() for key in order_by))
    items = list(db.scalars(stmt.offset((page - 1) * size).limit(size)).all())
    return OffsetPage(items=items, total=total, page=page, limit=size)

