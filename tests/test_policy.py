# tests/test_policy.py
"""Tests for the role permission policy."""

from types import SimpleNamespace

import pytest

from klasmwen.core.errors import PermissionDeniedError
from klasmwen.core.policy import (
    POLICY,
    assert_permission,
    get_author_id,
    has_permission,
)
from klasmwen.models import Role

ALL_ROLES = list(Role)


def _user(user_id: str, role: Role | str) -> dict[str, object]:
    return {"id": user_id, "role": role}


def test_owner_may_update_own_post() -> None:
    user = _user("u1", Role.STUDENT)
    assert has_permission(user, "posts", "update", {"author": {"id": "u1"}}) is True
    assert has_permission(user, "posts", "update", {"author": {"id": "u2"}}) is False


def test_admin_never_updates_but_deletes_anything() -> None:
    admin = _user("u1", Role.ADMIN)
    own_post = {"author": {"id": "u1"}}
    assert has_permission(admin, "posts", "update", own_post) is False
    assert has_permission(admin, "posts", "delete", own_post) is True
    assert has_permission(admin, "comments", "delete", {"author_id": "someone"}) is True


def test_moderator_updates_own_and_deletes_others() -> None:
    moderator = _user("m1", Role.MODERATOR)
    assert has_permission(moderator, "posts", "update", {"author_id": "m1"}) is True
    assert has_permission(moderator, "posts", "update", {"author_id": "u2"}) is False
    assert has_permission(moderator, "comments", "delete", {"author_id": "u2"}) is True


@pytest.mark.parametrize("role", [Role.STUDENT, Role.GUEST])
def test_members_cannot_delete_foreign_content(role: Role) -> None:
    user = _user("u1", role)
    assert has_permission(user, "comments", "delete", {"author_id": "u2"}) is False
    assert has_permission(user, "comments", "delete", {"author_id": "u1"}) is True


def test_guest_and_student_share_rules() -> None:
    assert POLICY[Role.GUEST].keys() == POLICY[Role.STUDENT].keys()
    for resource, actions in POLICY[Role.STUDENT].items():
        assert POLICY[Role.GUEST][resource].keys() == actions.keys()


@pytest.mark.parametrize("role", ALL_ROLES)
@pytest.mark.parametrize(
    ("resource", "action"),
    [
        ("posts", "update"),
        ("posts", "report"),
        ("comments", "update"),
        ("comments", "report"),
        ("notifications", "read"),
        ("notifications", "delete"),
    ],
)
def test_predicates_fail_closed_without_data(role: Role, resource: str, action: str) -> None:
    assert has_permission(_user("u1", role), resource, action) is False


@pytest.mark.parametrize(
    ("user", "resource", "action"),
    [
        (_user("u1", "SUPERUSER"), "posts", "create"),
        (_user("u1", Role.STUDENT), "messages", "create"),
        (_user("u1", Role.STUDENT), "posts", "archive"),
        ({"id": "u1"}, "posts", "create"),
        (None, "posts", "read"),
    ],
)
def test_unknown_combinations_are_denied(user, resource: str, action: str) -> None:
    assert has_permission(user, resource, action, {"author_id": "u1"}) is False


@pytest.mark.parametrize("role", ALL_ROLES)
def test_reporting_requires_someone_elses_content(role: Role) -> None:
    user = _user("u1", role)
    assert has_permission(user, "posts", "report", {"author_id": "u2"}) is True
    assert has_permission(user, "posts", "report", {"author_id": "u1"}) is False


@pytest.mark.parametrize("role", ALL_ROLES)
def test_notifications_are_recipient_only(role: Role) -> None:
    user = _user("u1", role)
    assert has_permission(user, "notifications", "update", {"user_id": "u1"}) is True
    assert has_permission(user, "notifications", "update", {"user_id": "u2"}) is False


def test_role_accepts_plain_strings_and_objects() -> None:
    user = SimpleNamespace(id="u1", role="STUDENT")
    post = SimpleNamespace(author=SimpleNamespace(id="u1"), author_id="u1")
    assert has_permission(user, "posts", "delete", post) is True


def test_get_author_id_prefers_nested_author() -> None:
    assert get_author_id({"author": {"id": "a"}, "author_id": "b"}) == "a"
    assert get_author_id({"author_id": "b"}) == "b"
    assert get_author_id(SimpleNamespace(author=None, author_id="c")) == "c"
    assert get_author_id({}) is None


def test_assert_permission_raises_permission_denied() -> None:
    user = _user("u1", Role.STUDENT)
    assert_permission(user, "posts", "create")
    with pytest.raises(PermissionDeniedError) as exc_info:
        assert_permission(user, "posts", "delete", {"author_id": "u2"})
    assert exc_info.value.status_code == 403
