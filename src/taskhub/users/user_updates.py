# src/taskhub/users/user_updates.py

"""Explicit user field changes accepted by UserRepository.update()."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .user_models import User


@dataclass(frozen=True, slots=True)
class SetFullName:
    full_name: str

    def apply(self, user: User) -> None:
        user.update_profile(full_name=self.full_name)


@dataclass(frozen=True, slots=True)
class SetEmail:
    email: str

    def apply(self, user: User) -> None:
        user.update_profile(email=self.email)


@dataclass(frozen=True, slots=True)
class MergePreferences:
    preferences: Mapping[str, Any]

    def apply(self, user: User) -> None:
        user.update_preferences(dict(self.preferences))


@dataclass(frozen=True, slots=True)
class SetActive:
    active: bool

    def apply(self, user: User) -> None:
        if self.active:
            user.activate()
        else:
            user.deactivate()


UserUpdate = SetFullName | SetEmail | MergePreferences | SetActive


def parse_user_updates(data: Mapping[str, Any]) -> list[UserUpdate]:
    """Unknown keys (including username, which is immutable) are ignored."""
    updates: list[UserUpdate] = []
    full_name = data.get("fullName", data.get("full_name"))
    if full_name is not None:
        updates.append(SetFullName(full_name))
    if data.get("email"):
        updates.append(SetEmail(data["email"]))
    if data.get("preferences"):
        updates.append(MergePreferences(data["preferences"]))
    active = data.get("isActive", data.get("is_active"))
    if active is not None:
        updates.append(SetActive(bool(active)))
    return updates
