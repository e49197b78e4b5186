# tests/test_errors.py
"""Tests for the error classifier."""

import sqlite3
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from fastapi.exceptions import RequestValidationError
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    NoResultFound,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from klasmwen.core.errors import (
    CommentPostMismatchError,
    ConflictError,
    ErrorResponse,
    PermissionDeniedError,
    PostNotFoundError,
    ServiceUnavailableError,
    ValidationError,
    classify,
)
from klasmwen.core.settings import settings
from klasmwen.schemas.post import PostCreate


def _integrity(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, sqlite3.IntegrityError(message))


@pytest.mark.parametrize("column", ["username", "email"])
def test_unique_user_field_is_conflict(column: str) -> None:
    result = classify(_integrity(f"UNIQUE constraint failed: users.{column}"))
    assert result.status_code == status.HTTP_409_CONFLICT
    assert result.body == {"message": f"User with this {column} already exists."}


def test_postgres_unique_violation_is_conflict() -> None:
    message = (
        'duplicate key value violates unique constraint "users_username_key"\n'
        "DETAIL:  Key (username)=(ada) already exists."
    )
    result = classify(_integrity(message))
    assert result.status_code == 409
    assert result.body["message"] == "User with this username already exists."


def test_other_unique_violation_uses_generic_conflict_message() -> None:
    result = classify(_integrity("UNIQUE constraint failed: likes.user_id, likes.post_id"))
    assert result.status_code == 409
    assert result.body["message"] == ConflictError.default_message


def test_foreign_key_violation_is_bad_request() -> None:
    result = classify(_integrity("FOREIGN KEY constraint failed"))
    assert result.status_code == 400
    assert result.body["message"].startswith("Invalid reference")


def test_not_null_violation_names_the_column() -> None:
    result = classify(_integrity("NOT NULL constraint failed: posts.title"))
    assert result.status_code == 400
    assert result.body["message"] == "Missing required field: posts.title."


def test_record_not_found_is_404() -> None:
    result = classify(NoResultFound("No row was found when one was required"))
    assert result.status_code == 404
    assert result.body == {"message": "The requested record was not found."}


def test_database_unavailable_is_503() -> None:
    error = OperationalError("SELECT 1", {}, sqlite3.OperationalError("unable to open database file"))
    result = classify(error)
    assert result.status_code == 503
    assert "unable to open" not in result.body["message"]


def test_database_lock_is_retryable_conflict() -> None:
    error = OperationalError("UPDATE posts", {}, sqlite3.OperationalError("database is locked"))
    assert classify(error).status_code == 409


def test_pool_timeout_is_503() -> None:
    result = classify(PoolTimeoutError("QueuePool limit reached"))
    assert result.status_code == 503
    assert result.body["message"] == "Database connection timeout. Please try again later."


def test_data_error_is_400() -> None:
    error = DataError("INSERT", {}, sqlite3.DataError("value too long"))
    assert classify(error).status_code == 400


def test_request_validation_lists_each_field() -> None:
    error = RequestValidationError(
        [
            {"loc": ("body", "title"), "msg": "Field required", "type": "missing"},
            {"loc": ("query", "limit"), "msg": "Input should be greater than 0", "type": "greater_than"},
        ]
    )
    result = classify(error)
    assert result.status_code == 400
    assert result.body["message"] == "Validation failed"
    assert result.body["errors"] == [
        {"path": "title", "message": "Field required"},
        {"path": "limit", "message": "Input should be greater than 0"},
    ]


def test_pydantic_validation_lists_each_field() -> None:
    with pytest.raises(PydanticValidationError) as exc_info:
        PostCreate.model_validate({"title": "abc"})
    result = classify(exc_info.value)
    assert result.status_code == 400
    paths = {item["path"] for item in result.body["errors"]}
    assert paths == {"title", "type"}


def test_expired_token_is_401() -> None:
    result = classify(ExpiredSignatureError("Signature has expired."))
    assert result.status_code == 401
    assert result.body["message"] == "Token has expired. Please log in again."
    assert result.headers == {"WWW-Authenticate": "Bearer"}


def test_malformed_token_is_401() -> None:
    result = classify(JWTError("Not enough segments"))
    assert result.status_code == 401
    assert result.body["message"] == "Invalid token. Please log in again."


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConnectionRefusedError("connect ECONNREFUSED 127.0.0.1:5432"), 503),
        (RuntimeError("connection refused by upstream"), 503),
        (TimeoutError("read ETIMEDOUT"), 408),
        (RuntimeError("boom: secret internals"), 500),
        (KeyError("missing"), 500),
    ],
)
def test_generic_errors(error: Exception, code: int) -> None:
    result = classify(error)
    assert result.status_code == code
    assert "secret" not in result.body["message"]
    assert set(result.body) == {"message"}


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ValidationError(errors=[{"path": "limit", "message": "bad"}]), 400),
        (CommentPostMismatchError(), 400),
        (PermissionDeniedError(), 403),
        (PostNotFoundError(), 404),
        (ConflictError("Post already bookmarked"), 409),
        (ServiceUnavailableError(), 503),
    ],
)
def test_application_errors_keep_their_status(error: Exception, code: int) -> None:
    result = classify(error)
    assert isinstance(result, ErrorResponse)
    assert result.status_code == code
    assert result.body["message"] == error.message


def test_validation_error_keeps_itemized_errors() -> None:
    result = classify(ValidationError(errors=[{"path": "limit", "message": "bad"}]))
    assert result.body["errors"] == [{"path": "limit", "message": "bad"}]


def test_http_exception_keeps_status_and_detail() -> None:
    result = classify(StarletteHTTPException(status_code=405, detail="Method Not Allowed"))
    assert result.status_code == 405
    assert result.body == {"message": "Method Not Allowed"}


def test_unknown_route_renders_message_body(client) -> None:
    response = client.get("/api/v1/does-not-exist")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Not Found"}


def test_invalid_body_renders_itemized_400(client, student_headers) -> None:
    response = client.post("/api/v1/posts", json={"title": "Hi"}, headers=student_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["message"] == "Validation failed"
    assert {item["path"] for item in body["errors"]} >= {"title", "type"}


def test_expired_token_is_rejected_over_http(client, student) -> None:
    token = jwt.encode(
        {"sub": student.id, "exp": datetime.now(UTC) - timedelta(minutes=1)},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Token has expired. Please log in again."}


def test_garbage_token_is_rejected_over_http(client) -> None:
    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Invalid token. Please log in again."


def test_missing_token_is_401(client) -> None:
    response = client.get("/api/v1/users/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
