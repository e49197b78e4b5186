# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from klasmwen.core.security import create_access_token
from klasmwen.db.session import Base
from klasmwen.db.session import get_db as app_get_session
from klasmwen.db.time import utcnow
from klasmwen.init_db import seed_report_reasons
from klasmwen.main import app as fastapi_app
from klasmwen.models import Avatar, Comment, Post, PostType, ReportReason, Role, Tag, User

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
# Rows get strictly increasing timestamps so ordering assertions never tie.
_CLOCK = count(1)
_EPOCH = utcnow() - timedelta(days=30)


def next_timestamp():
    return _EPOCH + timedelta(seconds=next(_CLOCK))


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with the given role."""

    def _make_user(role: Role = Role.STUDENT, username: str | None = None) -> User:
        number = next(_USER_COUNTER)
        name = username or f"{role.value.lower()}_{number}"
        user = User(username=name, email=f"{name}@example.com", role=role)
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def student(make_user: Callable[..., User]) -> User:
    return make_user(Role.STUDENT)


@pytest.fixture()
def other_student(make_user: Callable[..., User]) -> User:
    return make_user(Role.STUDENT)


@pytest.fixture()
def moderator(make_user: Callable[..., User]) -> User:
    return make_user(Role.MODERATOR)


@pytest.fixture()
def admin(make_user: Callable[..., User]) -> User:
    return make_user(Role.ADMIN)


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers carrying a token for ``user``."""
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers


@pytest.fixture()
def student_headers(student: User) -> dict[str, str]:
    return auth_headers(student)


@pytest.fixture()
def other_headers(other_student: User) -> dict[str, str]:
    return auth_headers(other_student)


@pytest.fixture()
def moderator_headers(moderator: User) -> dict[str, str]:
    return auth_headers(moderator)


@pytest.fixture()
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture()
def tick() -> Callable[[], Any]:
    """Return the shared increasing-timestamp source."""
    return next_timestamp


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory persisting posts with increasing timestamps."""

    def _make_post(author: User, **overrides: Any) -> Post:
        created_at = next_timestamp()
        values: dict[str, Any] = {
            "title": "Photosynthesis notes",
            "content": "Light reactions happen in the thylakoid membranes.",
            "type": PostType.NOTE,
            "author_id": author.id,
            "created_at": created_at,
            "updated_at": created_at,
        }
        values.update(overrides)
        post = Post(**values)
        db_session.add(post)
        db_session.flush()
        db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    """Return a factory persisting raw comments, bypassing the threading service."""

    def _make_comment(author: User, post: Post, **overrides: Any) -> Comment:
        values: dict[str, Any] = {
            "content": "Great explanation, thanks!",
            "author_id": author.id,
            "post_id": post.id,
            "created_at": next_timestamp(),
        }
        values.update(overrides)
        comment = Comment(**values)
        db_session.add(comment)
        db_session.flush()
        db_session.refresh(comment)
        return comment

    return _make_comment


@pytest.fixture()
def test_post(student: User, make_post: Callable[..., Post]) -> Post:
    """Create a baseline post authored by ``student``."""
    return make_post(student)


@pytest.fixture()
def report_reasons(db_session: Session) -> list[ReportReason]:
    """Seed the report reason catalogue and return the active reasons."""
    seed_report_reasons(db_session)
    return list(db_session.query(ReportReason).order_by(ReportReason.id).all())


@pytest.fixture()
def make_tag(db_session: Session) -> Callable[[str], Tag]:
    def _make_tag(name: str) -> Tag:
        tag = Tag(name=name)
        db_session.add(tag)
        db_session.flush()
        return tag

    return _make_tag


@pytest.fixture()
def make_avatar(db_session: Session) -> Callable[..., Avatar]:
    """Return a factory persisting catalogue avatars."""

    def _make_avatar(url: str | None = None, *, is_default: bool = False) -> Avatar:
        avatar = Avatar(
            url=url or f"https://cdn.test/avatars/{next(_USER_COUNTER)}.svg",
            is_default=is_default,
        )
        db_session.add(avatar)
        db_session.flush()
        return avatar

    return _make_avatar
