# src/taskhub/users/user_controller.py

"""
User registration, simulated login and profile management.

There is no server-side session: login() resolves a username to a user id and
the caller passes that id as `actor_id` to later calls.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.access import AUTH_REQUIRED, resolve_actor
from ..core.clock import to_iso
from ..core.ports import UserRepo
from ..core.result import Result, folds_errors
from .user_models import User
from .user_updates import MergePreferences, SetActive, parse_user_updates

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
ACCOUNT_INACTIVE = "Account is inactive"
USERNAME_REQUIRED = "Username is required"
EMAIL_REQUIRED = "Email is required"
EMPTY_QUERY = "Search query must not be empty"


def _private_profile(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "fullName": user.full_name,
        "role": user.role.value,
        "preferences": user.preferences,
        "lastLoginAt": to_iso(user.last_login_at),
    }


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


class UserController:
    def __init__(self, users: UserRepo) -> None:
        self._users = users

    @folds_errors
    def register(self, data: Mapping[str, Any]) -> Result:
        if _blank(data.get("username")):
            return Result.fail(USERNAME_REQUIRED)
        if _blank(data.get("email")):
            return Result.fail(EMAIL_REQUIRED)

        user = self._users.create(dict(data))
        logger.info("Registered user id=%s username=%s", user.id, user.username)
        return Result.ok(
            {"id": user.id, "username": user.username, "email": user.email, "fullName": user.full_name},
            message=f"User {user.username} registered",
        )

    @folds_errors
    def login(self, username: str) -> Result:
        if _blank(username):
            return Result.fail(USERNAME_REQUIRED)

        user = self._users.find_by_username(username)
        if user is None:
            return Result.fail(USER_NOT_FOUND)
        if not user.is_active:
            return Result.fail(ACCOUNT_INACTIVE)

        self._users.record_login(user.id)
        logger.info("Login user id=%s", user.id)
        return Result.ok(_private_profile(user), message=f"Welcome, {user.display_name}!")

    @folds_errors
    def get_current_user(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        return Result.ok(_private_profile(actor))

    @folds_errors
    def update_profile(self, actor_id: str | None, updates: Mapping[str, Any]) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        # activation is not a profile field
        changes = [u for u in parse_user_updates(updates) if not isinstance(u, SetActive)]
        updated = self._users.update(actor.id, changes)
        if updated is None:
            return Result.fail("Failed to update profile")
        return Result.ok(_private_profile(updated), message="Profile updated")

    @folds_errors
    def update_preferences(self, actor_id: str | None, preferences: Mapping[str, Any]) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        updated = self._users.update(actor.id, [MergePreferences(dict(preferences))])
        if updated is None:
            return Result.fail("Failed to update preferences")
        return Result.ok(updated.preferences, message="Preferences updated")

    @folds_errors
    def deactivate_account(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        self._users.delete(actor.id)
        return Result.ok(message=f"Account {actor.username} deactivated")

    @folds_errors
    def get_all_users(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        users = [u.public_profile() for u in self._users.find_active()]
        return Result.ok(users, count=len(users))

    @folds_errors
    def search_users(self, actor_id: str | None, query: str) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        if _blank(query):
            return Result.fail(EMPTY_QUERY)

        users = [u.public_profile() for u in self._users.search(query) if u.is_active]
        return Result.ok(users, count=len(users), query=query)

    @folds_errors
    def get_user_by_id(self, user_id: str) -> Result:
        user = self._users.find_by_id(user_id)
        if user is None:
            return Result.fail(USER_NOT_FOUND)
        return Result.ok(user.public_profile())
