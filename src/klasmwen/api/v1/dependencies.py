"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from klasmwen.core.errors import AuthenticationError, PermissionDeniedError
from klasmwen.core.security import decode_access_token
from klasmwen.core.settings import settings
from klasmwen.db.session import get_db
from klasmwen.models import Role, User
from klasmwen.services.pagination import clamp_limit, decode_cursor

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        AuthenticationError: If no token was sent or its user no longer exists.
        JWTError: If the token is malformed or expired; classified as 401.
    """
    if credentials is None:
        raise AuthenticationError("Authentication required. Please log in.")
    user_id = decode_access_token(credentials.credentials)
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_moderator(user: CurrentUserDep) -> User:
    """Allow only ADMIN and MODERATOR accounts through."""
    if not user.is_moderator:
        raise PermissionDeniedError("Moderator or admin role required.")
    return user


ModeratorDep = Annotated[User, Depends(require_moderator)]


def require_admin(user: CurrentUserDep) -> User:
    """Allow only ADMIN accounts through."""
    if user.role is not Role.ADMIN:
        raise PermissionDeniedError("Admin role required.")
    return user


AdminDep = Annotated[User, Depends(require_admin)]


def page_limit(
    limit: int = Query(
        settings.pagination_default_limit,
        ge=1,
        description="Page size; values above the configured maximum are capped",
    ),
) -> int:
    return clamp_limit(limit)


LimitDep = Annotated[int, Depends(page_limit)]


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise ValueError("cursor ids start at 1")
    return value


def post_cursor(
    cursor: str | None = Query(None, description="nextCursor of the previous page"),
) -> str | None:
    """Decode a cursor that carries a post id."""
    if cursor is None:
        return None
    return decode_cursor(cursor, lambda raw: str(UUID(raw)))


def id_cursor(
    cursor: str | None = Query(None, description="nextCursor of the previous page"),
) -> int | None:
    """Decode a cursor that carries a numeric comment or notification id."""
    if cursor is None:
        return None
    return decode_cursor(cursor, _positive_int)


PostCursorDep = Annotated[str | None, Depends(post_cursor)]
IdCursorDep = Annotated[int | None, Depends(id_cursor)]
