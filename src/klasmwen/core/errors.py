"""Application error taxonomy and the classifier that turns failures into responses.

Services raise the typed errors below and never format HTTP responses
themselves. Everything that escapes a request handler is passed through
:func:`classify` exactly once (see the handlers registered in ``main.py``),
which maps it to a status code plus a ``{"message", "errors"?}`` body.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from fastapi.exceptions import RequestValidationError
from jose import ExpiredSignatureError, JWTError
from jose.exceptions import JWTClaimsError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import (
    ArgumentError,
    DataError,
    DBAPIError,
    IntegrityError,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
    StatementError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Internal server error"
VALIDATION_MESSAGE = "Validation failed"
RECORD_NOT_FOUND_MESSAGE = "The requested record was not found."

_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<columns>.+)")
_PG_KEY = re.compile(r"Key \((?P<columns>[^)]+)\)")
_SQLITE_NOT_NULL = re.compile(r"NOT NULL constraint failed: (?P<column>\S+)")
_PG_NOT_NULL = re.compile(r'null value in column "(?P<column>[^"]+)"')


class AppError(Exception):
    """Base class for errors raised deliberately by the application."""

    status_code: int = 500
    default_message: str = GENERIC_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input shape or range; carries one entry per failed field."""

    status_code = 400
    default_message = VALIDATION_MESSAGE

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required."


class PermissionDeniedError(AppError):
    status_code = 403
    default_message = "You do not have permission to perform this action."


class NotFoundError(AppError):
    status_code = 404
    default_message = RECORD_NOT_FOUND_MESSAGE


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class PostNotFoundError(NotFoundError):
    default_message = "Post not found"


class CommentNotFoundError(NotFoundError):
    default_message = "Comment not found"


class ReportNotFoundError(NotFoundError):
    default_message = "Report not found"


class ReportReasonNotFoundError(NotFoundError):
    default_message = "Report reason not found or inactive"


class NotificationNotFoundError(NotFoundError):
    default_message = "Notification not found"


class BookmarkNotFoundError(NotFoundError):
    default_message = "Bookmark not found"


class TagNotFoundError(NotFoundError):
    default_message = "Tag not found"


class AvatarNotFoundError(NotFoundError):
    default_message = "Avatar not found"


class CommentPostMismatchError(AppError):
    """The parent comment of a reply belongs to a different post."""

    status_code = 400
    default_message = "Parent comment does not belong to this post."


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists."


class ServiceUnavailableError(AppError):
    status_code = 503
    default_message = "Service temporarily unavailable."


@dataclass(frozen=True)
class ErrorResponse:
    """Status code and JSON body ready to be written to the client."""

    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] | None = field(default=None)


def _response(status_code: int, message: str, **extra: Any) -> ErrorResponse:
    headers = extra.pop("headers", None)
    body: dict[str, Any] = {"message": message}
    body.update(extra)
    return ErrorResponse(status_code=status_code, body=body, headers=headers)


def _field_errors(raw_errors: list[Any]) -> list[dict[str, str]]:
    items: list[dict[str, str]] = []
    for error in raw_errors:
        location = list(error.get("loc", ()))
        if location and location[0] in _REQUEST_LOCATIONS:
            location = location[1:]
        items.append(
            {
                "path": ".".join(str(part) for part in location),
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return items


def _driver_message(exc: DBAPIError) -> str:
    return str(exc.orig) if exc.orig is not None else str(exc)


def _driver_code(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _unique_columns(message: str) -> list[str]:
    match = _SQLITE_UNIQUE.search(message)
    if match:
        return [part.strip().rsplit(".", 1)[-1] for part in match.group("columns").split(",")]
    match = _PG_KEY.search(message)
    if match:
        return [part.strip() for part in match.group("columns").split(",")]
    return []


def _classify_integrity(exc: IntegrityError) -> ErrorResponse:
    message = _driver_message(exc)
    lowered = message.lower()
    code = _driver_code(exc)

    if code == "23505" or "unique" in lowered or "duplicate key" in lowered:
        columns = _unique_columns(message)
        for column in ("username", "email"):
            if column in columns:
                return _response(409, f"User with this {column} already exists.")
        return _response(409, ConflictError.default_message)

    if code == "23503" or "foreign key" in lowered:
        return _response(400, "Invalid reference: foreign key constraint failed.")

    if code == "23502" or "not null" in lowered or "null value" in lowered:
        match = _SQLITE_NOT_NULL.search(message) or _PG_NOT_NULL.search(message)
        if match:
            return _response(400, f"Missing required field: {match.group('column')}.")
        return _response(400, "Missing required field.")

    return _response(400, "Invalid value.")


def _classify_database(exc: SQLAlchemyError) -> ErrorResponse:
    if isinstance(exc, NoResultFound):
        return _response(404, RECORD_NOT_FOUND_MESSAGE)
    if isinstance(exc, PoolTimeoutError):
        return _response(503, "Database connection timeout. Please try again later.")
    if isinstance(exc, IntegrityError):
        return _classify_integrity(exc)
    if isinstance(exc, OperationalError):
        lowered = _driver_message(exc).lower()
        if "deadlock" in lowered or "locked" in lowered or _driver_code(exc) == "40001":
            return _response(409, "Operation failed due to concurrent access. Please retry.")
        return _response(503, "Database temporarily unavailable. Please try again later.")
    if isinstance(exc, DataError):
        return _response(400, "Invalid value.")
    if isinstance(exc, DBAPIError):
        return _response(500, "An unexpected database error occurred.")
    if isinstance(exc, StatementError | ArgumentError):
        return _response(400, "Invalid query parameters or data structure.")
    return _response(500, "An unexpected database error occurred.")


def _classify_token(exc: JWTError) -> ErrorResponse:
    headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, ExpiredSignatureError):
        return _response(401, "Token has expired. Please log in again.", headers=headers)
    if isinstance(exc, JWTClaimsError):
        return _response(401, "Invalid token claims. Please log in again.", headers=headers)
    return _response(401, "Invalid token. Please log in again.", headers=headers)


def _classify_generic(exc: BaseException) -> ErrorResponse:
    text = str(exc).lower()
    if isinstance(exc, ConnectionRefusedError) or "econnrefused" in text or "connection refused" in text:
        return _response(503, "Service temporarily unavailable.")
    if isinstance(exc, TimeoutError) or "etimedout" in text or "timed out" in text:
        return _response(408, "Request timeout. Please try again.")
    return _response(500, GENERIC_MESSAGE)


def _classify(exc: BaseException) -> ErrorResponse:
    if isinstance(exc, ValidationError):
        return _response(exc.status_code, exc.message, errors=exc.errors)
    if isinstance(exc, AppError):
        return _response(exc.status_code, exc.message)
    if isinstance(exc, RequestValidationError | PydanticValidationError):
        return _response(400, VALIDATION_MESSAGE, errors=_field_errors(list(exc.errors())))
    if isinstance(exc, SQLAlchemyError):
        return _classify_database(exc)
    if isinstance(exc, JWTError):
        return _classify_token(exc)
    if isinstance(exc, StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else GENERIC_MESSAGE
        return _response(exc.status_code, detail, headers=exc.headers)
    return _classify_generic(exc)


def classify(exc: BaseException) -> ErrorResponse:
    """Map any failure to a stable status code and response body.

    Never raises. Internal details (driver messages, tracebacks) are logged
    here and never copied into the returned body.

    Args:
        exc: The exception that escaped a request handler.

    Returns:
        ErrorResponse with the status code and ``{"message", "errors"?}`` body.
    """
    try:
        result = _classify(exc)
    except Exception:  # pragma: no cover - classifier must stay total
        logger.exception("Error classifier failed on %s", type(exc).__name__)
        return _response(500, GENERIC_MESSAGE)

    if result.status_code >= 500:
        logger.error(
            "Request failed with %s (%s)",
            type(exc).__name__,
            result.status_code,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.info(
            "Request rejected with %s (%s): %s",
            type(exc).__name__,
            result.status_code,
            exc,
        )
    return result
