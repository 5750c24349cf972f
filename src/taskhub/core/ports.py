# src/taskhub/core/ports.py

"""
Ports (interfaces) used across layers.

Controllers depend on these Protocols instead of the concrete repositories,
and StorageManager depends on KeyValueBackend instead of SQLite.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol


class KeyValueBackend(Protocol):
    """String-to-string store underneath StorageManager."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class UserRepo(Protocol):
    def create(self, data: dict[str, Any]) -> Any: ...
    def find_by_id(self, user_id: str) -> Any | None: ...
    def find_by_username(self, username: str) -> Any | None: ...
    def find_by_email(self, email: str) -> Any | None: ...
    def find_all(self) -> list[Any]: ...
    def find_active(self) -> list[Any]: ...
    def update(self, user_id: str, updates: Sequence[Any]) -> Any | None: ...
    def delete(self, user_id: str) -> bool: ...
    def record_login(self, user_id: str) -> Any | None: ...
    def search(self, query: str) -> list[Any]: ...


class TaskRepo(Protocol):
    def create(self, data: dict[str, Any]) -> Any: ...
    def find_by_id(self, task_id: str) -> Any | None: ...
    def find_all(self) -> list[Any]: ...
    def find_overdue(self) -> list[Any]: ...
    def find_due_soon(self, days: int) -> list[Any]: ...
    def filter(self, criteria: Any) -> list[Any]: ...
    def sort(self, tasks: Iterable[Any], key: Any = ..., order: Any = ...) -> list[Any]: ...
    def search(self, query: str) -> list[Any]: ...
    def update(self, task_id: str, updates: Sequence[Any]) -> Any | None: ...
    def delete(self, task_id: str) -> bool: ...
    def delete_all_by_owner(self, owner_id: str) -> bool: ...
    def get_stats(self, owner_id: str | None = None, *, due_soon_days: int = 3) -> Any: ...
    def get_category_stats(self, owner_id: str | None = None) -> dict[str, Any]: ...
    def get_most_used_categories(self, owner_id: str | None = None, limit: int = 5) -> list[Any]: ...
