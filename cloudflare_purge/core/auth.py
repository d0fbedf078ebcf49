"""Caller identity for the purge endpoint.

The host owns authentication. This module only answers three questions:
who is the host user on this request (if any), is the request a trusted
in-process call, and does a user hold an elevated role.
"""

from collections.abc import Mapping
from typing import Any

from fastapi import Request

INTERNAL_CALL_HEADER = "x-internal-call"
ADMIN_ROLE = "admin"


async def get_optional_user(request: Request) -> Any | None:
    """Return the host-authenticated user, or ``None``.

    Reads ``request.state.user`` as set by the host's auth middleware.
    Hosts with a different session model override this dependency:

        app.dependency_overrides[get_optional_user] = my_current_user
    """
    return getattr(request.state, "user", None)


def is_internal_call(headers: Mapping[str, str] | None) -> bool:
    """True when the request carries ``x-internal-call: true``."""
    if not headers:
        return False
    for name, value in headers.items():
        if name.lower() == INTERNAL_CALL_HEADER:
            return str(value).lower() == "true"
    return False


def _user_roles(user: Any) -> list[str]:
    if isinstance(user, Mapping):
        roles = user.get("roles")
    else:
        roles = getattr(user, "roles", None)
    if isinstance(roles, str):
        return [roles]
    return list(roles or [])


def is_elevated(user: Any) -> bool:
    """True when ``user`` holds the admin role."""
    if user is None:
        return False
    return ADMIN_ROLE in _user_roles(user)


def user_id(user: Any) -> str | None:
    """Best-effort id of a host user for log lines."""
    if user is None:
        return None
    value = user.get("id") if isinstance(user, Mapping) else getattr(user, "id", None)
    return str(value) if value is not None else None
