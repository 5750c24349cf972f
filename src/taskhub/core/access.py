# src/taskhub/core/access.py

from __future__ import annotations

from typing import Any

from .ports import UserRepo

AUTH_REQUIRED = "Authentication required"


def resolve_actor(users: UserRepo, actor_id: str | None) -> Any | None:
    """
    Map the caller-supplied actor id to an active user.

    The caller owns its session; nothing is remembered between calls.
    """
    if not actor_id:
        return None
    user = users.find_by_id(actor_id)
    if user is None or not user.is_active:
        return None
    return user
