"""Role based permission policy.

The whole authorization surface lives in :data:`POLICY`, a nested mapping of
role -> resource -> action. A value is either a plain ``bool`` or an ownership
predicate ``(user, data) -> bool`` evaluated against the resource instance.
Lookups fail closed: unknown roles, resources or actions are denied, and a
predicate is never invoked without data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from klasmwen.core.errors import PermissionDeniedError
from klasmwen.models.user import Role

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Any], bool]
Rule = bool | Predicate


def _read(data: Any, name: str) -> Any:
    if isinstance(data, Mapping):
        return data.get(name)
    return getattr(data, name, None)


def get_author_id(data: Any) -> str | None:
    """Return the author id of a post/comment given as a mapping or an object."""
    author = _read(data, "author")
    author_id = _read(author, "id") if author is not None else None
    return author_id if author_id is not None else _read(data, "author_id")


def _user_id(user: Any) -> str | None:
    return _read(user, "id")


def is_owner(user: Any, data: Any) -> bool:
    user_id = _user_id(user)
    return user_id is not None and user_id == get_author_id(data)


def is_not_owner(user: Any, data: Any) -> bool:
    user_id = _user_id(user)
    author_id = get_author_id(data)
    return user_id is not None and author_id is not None and user_id != author_id


def is_recipient(user: Any, data: Any) -> bool:
    user_id = _user_id(user)
    return user_id is not None and user_id == _read(data, "user_id")


def _member_rules() -> dict[str, dict[str, Rule]]:
    content = {
        "create": True,
        "read": True,
        "update": is_owner,
        "delete": is_owner,
        "report": is_not_owner,
    }
    return {
        "posts": dict(content),
        "comments": dict(content),
        "notifications": {
            "read": is_recipient,
            "update": is_recipient,
            "delete": is_recipient,
        },
    }


def _moderator_rules(*, may_update_own: bool) -> dict[str, dict[str, Rule]]:
    content: dict[str, Rule] = {
        "create": True,
        "read": True,
        "update": is_owner if may_update_own else False,
        "delete": True,
        "report": is_not_owner,
    }
    return {
        "posts": dict(content),
        "comments": dict(content),
        "notifications": {
            "read": is_recipient,
            "update": is_recipient,
            "delete": is_recipient,
        },
    }


POLICY: dict[Role, dict[str, dict[str, Rule]]] = {
    # Moderation is removal only: admins delete anything and edit nothing.
    Role.ADMIN: _moderator_rules(may_update_own=False),
    Role.MODERATOR: _moderator_rules(may_update_own=True),
    Role.STUDENT: _member_rules(),
    # Same rules as STUDENT until a restricted guest profile is agreed on.
    Role.GUEST: _member_rules(),
}


def _role_of(user: Any) -> Role | None:
    raw = _read(user, "role")
    if isinstance(raw, Role):
        return raw
    try:
        return Role(raw)
    except ValueError:
        return None


def has_permission(user: Any, resource: str, action: str, data: Any = None) -> bool:
    """Return whether ``user`` may perform ``action`` on ``resource``.

    Args:
        user: Identity exposing ``id`` and ``role`` (object or mapping).
        resource: Resource name such as ``"posts"``.
        action: Action name such as ``"update"``.
        data: Resource instance consulted by ownership predicates.

    Returns:
        True when allowed; False for denied or unknown combinations.
    """
    if user is None:
        return False
    role = _role_of(user)
    if role is None:
        return False

    rule = POLICY.get(role, {}).get(resource, {}).get(action)
    if rule is None:
        return False
    if isinstance(rule, bool):
        return rule
    if data is None:
        return False
    return bool(rule(user, data))


def assert_permission(user: Any, resource: str, action: str, data: Any = None) -> None:
    """Raise :class:`PermissionDeniedError` unless the action is allowed."""
    if not has_permission(user, resource, action, data):
        logger.info(
            "Denied %s on %s for user %s",
            action,
            resource,
            _user_id(user),
        )
        raise PermissionDeniedError(f"You do not have permission to {action} this {resource[:-1]}.")
