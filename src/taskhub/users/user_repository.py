# src/taskhub/users/user_repository.py

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from ..core.clock import utc_now
from ..core.errors import DuplicateError, ValidationError
from ..storage.manager import StorageManager
from .user_models import User, normalize_email
from .user_updates import SetEmail, UserUpdate

logger = logging.getLogger(__name__)

RECENT_LOGIN_WINDOW = timedelta(days=1)


class UserRepository:
    """
    Authoritative in-memory index of users, written through to storage.

    - the index is loaded once at construction (reload() re-reads it)
    - every mutating call persists the whole collection before returning
    - username and email are unique across all users, inactive ones included
    """

    storage_key = "users"

    def __init__(self, storage: StorageManager) -> None:
        self._storage = storage
        self._users: dict[str, User] = {}
        self._lock = threading.RLock()
        self.reload()

    def reload(self) -> None:
        with self._lock:
            self._users = {}
            raw = self._storage.load(self.storage_key, [])
            for item in raw if isinstance(raw, list) else []:
                try:
                    user = User.from_dict(item)
                except (ValidationError, TypeError, ValueError, AttributeError):
                    logger.exception("Skipping unreadable user record: %r", item)
                    continue
                self._users[user.id] = user
            logger.info("Loaded %d users from storage", len(self._users))

    # ---- commands ----

    def create(self, data: dict[str, Any]) -> User:
        username = data.get("username")
        email = data.get("email")
        with self._lock:
            if isinstance(username, str) and self.find_by_username(username):
                raise DuplicateError("username", f"Username '{username.strip().lower()}' is already taken")
            if isinstance(email, str) and self.find_by_email(email):
                raise DuplicateError("email", f"Email '{email.strip().lower()}' is already registered")

            user = User(username, email, data.get("fullName", data.get("full_name")))  # type: ignore[arg-type]
            self._users[user.id] = user
            self._persist()
        logger.debug("User created id=%s username=%s", user.id, user.username)
        return user

    def update(self, user_id: str, updates: Sequence[UserUpdate]) -> User | None:
        """
        Apply updates all-or-nothing: they are rehearsed on a copy first, so a
        rejected update leaves the indexed user and the store untouched.
        """
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None

            for u in updates:
                if isinstance(u, SetEmail):
                    other = self.find_by_email(u.email) if isinstance(u.email, str) else None
                    if other is not None and other.id != user_id:
                        raise DuplicateError("email", f"Email '{normalize_email(u.email)}' is already registered")

            rehearsal = current.clone()
            for u in updates:
                u.apply(rehearsal)

            for u in updates:
                u.apply(current)
            self._persist()
        logger.debug("User updated id=%s changes=%d", user_id, len(updates))
        return current

    def delete(self, user_id: str) -> bool:
        """Soft delete: the user is deactivated and kept."""
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            user.deactivate()
            self._persist()
        logger.info("User deactivated id=%s", user_id)
        return True

    def hard_delete(self, user_id: str) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            self._persist()
        logger.info("User removed id=%s", user_id)
        return True

    def record_login(self, user_id: str) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user.record_login()
            self._persist()
        return user

    # ---- queries ----

    def find_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def find_by_username(self, username: str) -> User | None:
        wanted = (username or "").strip().lower()
        for user in self._users.values():
            if user.username == wanted:
                return user
        return None

    def find_by_email(self, email: str) -> User | None:
        wanted = (email or "").strip().lower()
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    def find_all(self) -> list[User]:
        return list(self._users.values())

    def find_active(self) -> list[User]:
        return [u for u in self._users.values() if u.is_active]

    def search(self, query: str) -> list[User]:
        term = (query or "").strip().lower()
        if not term:
            return []
        return [
            u
            for u in self._users.values()
            if term in u.username or term in u.email or term in u.full_name.lower()
        ]

    def get_stats(self) -> dict[str, int]:
        users = self.find_all()
        active = sum(1 for u in users if u.is_active)
        since = utc_now() - RECENT_LOGIN_WINDOW
        recent = sum(1 for u in users if u.last_login_at is not None and u.last_login_at > since)
        return {
            "total": len(users),
            "active": active,
            "inactive": len(users) - active,
            "recent_logins": recent,
        }

    def __len__(self) -> int:
        return len(self._users)

    # ---- internals ----

    def _persist(self) -> None:
        self._storage.save(self.storage_key, [u.to_dict() for u in self._users.values()])
