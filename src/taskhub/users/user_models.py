# src/taskhub/users/user_models.py

from __future__ import annotations

import copy
import re
import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.clock import parse_timestamp, to_iso, utc_now
from ..core.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class UserRole(StrEnum):
    USER = "user"
    ADMIN = "admin"


def default_preferences() -> dict[str, Any]:
    return {
        "theme": "light",
        "defaultCategory": "personal",
        "emailNotifications": True,
    }


def normalize_username(username: Any) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("username", "Username is required")
    return username.strip().lower()


def normalize_email(email: Any) -> str:
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValidationError("email", f"Invalid email: {email!r}")
    return email.strip().lower()


def clean_full_name(full_name: Any) -> str:
    if full_name is None:
        return ""
    if not isinstance(full_name, str):
        raise ValidationError("full_name", f"Full name must be a string, got {full_name!r}")
    return full_name.strip()


class User:
    """
    A person who owns and is assigned tasks.

    username/email are stored trimmed and lower-cased. Deactivation is a soft
    delete: the record stays, it is only filtered out of "active" queries.
    """

    def __init__(self, username: str, email: str, full_name: str | None = None) -> None:
        self._id = f"user_{uuid.uuid4().hex}"
        self._username = normalize_username(username)
        self._email = normalize_email(email)
        self._full_name = clean_full_name(full_name)
        self._role = UserRole.USER
        self._is_active = True
        self._created_at = utc_now()
        self._last_login_at: datetime | None = None
        self._preferences = default_preferences()

    @property
    def id(self) -> str:
        return self._id

    @property
    def username(self) -> str:
        return self._username

    @property
    def email(self) -> str:
        return self._email

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def display_name(self) -> str:
        return self._full_name or self._username

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def last_login_at(self) -> datetime | None:
        return self._last_login_at

    @property
    def preferences(self) -> dict[str, Any]:
        return copy.deepcopy(self._preferences)

    # ---- mutators ----

    def update_profile(self, full_name: str | None = None, email: str | None = None) -> None:
        # validate before touching anything
        new_email = normalize_email(email) if email else None
        new_name = clean_full_name(full_name) if full_name is not None else None
        if new_name is not None:
            self._full_name = new_name
        if new_email is not None:
            self._email = new_email

    def update_preferences(self, preferences: dict[str, Any]) -> None:
        if not isinstance(preferences, dict):
            raise ValidationError("preferences", "Preferences must be a mapping")
        self._preferences.update(copy.deepcopy(preferences))

    def record_login(self) -> None:
        self._last_login_at = utc_now()

    def activate(self) -> None:
        self._is_active = True

    def deactivate(self) -> None:
        self._is_active = False

    def public_profile(self) -> dict[str, Any]:
        """Minimal fields other users may see (assignee pickers, search)."""
        return {"id": self._id, "username": self._username, "fullName": self._full_name}

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "username": self._username,
            "email": self._email,
            "fullName": self._full_name,
            "role": self._role.value,
            "isActive": self._is_active,
            "createdAt": to_iso(self._created_at),
            "lastLoginAt": to_iso(self._last_login_at),
            "preferences": copy.deepcopy(self._preferences),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        user = cls(data.get("username", ""), data.get("email", ""), data.get("fullName"))
        if data.get("id"):
            user._id = str(data["id"])
        try:
            user._role = UserRole(data.get("role") or UserRole.USER)
        except ValueError:
            raise ValidationError.invalid_choice("role", data.get("role"), [r.value for r in UserRole]) from None
        user._is_active = bool(data.get("isActive", True))
        user._created_at = parse_timestamp(data.get("createdAt")) or user._created_at
        user._last_login_at = parse_timestamp(data.get("lastLoginAt"))
        prefs = data.get("preferences")
        if isinstance(prefs, dict):
            user._preferences = copy.deepcopy(prefs)
        return user

    def clone(self) -> User:
        return User.from_dict(self.to_dict())

    def __repr__(self) -> str:
        return f"User(id={self._id!r}, username={self._username!r}, active={self._is_active})"
