# src/taskhub/tasks/task_queries.py

"""Value types for the task query surface: filter criteria, sort keys and stats."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any

from ..core.flags import parse_bool

DEFAULT_DUE_SOON_DAYS = 3


class SortKey(StrEnum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    STATUS = "status"
    CATEGORY = "category"
    TITLE = "title"

    @classmethod
    def parse(cls, raw: SortKey | str | None) -> SortKey:
        if isinstance(raw, cls):
            return raw
        if not raw:
            return cls.CREATED_AT
        return _SORT_ALIASES.get(str(raw), cls.CREATED_AT)


_SORT_ALIASES = {
    **{k.value: k for k in SortKey},
    "created_at": SortKey.CREATED_AT,
    "updated_at": SortKey.UPDATED_AT,
    "due_date": SortKey.DUE_DATE,
}


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: SortOrder | str | None) -> SortOrder:
        if isinstance(raw, cls):
            return raw
        return cls.ASC if str(raw or "").lower() == "asc" else cls.DESC


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if data.get(k) is not None:
            return data[k]
    return None


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """
    Independent predicates, ANDed together. None means "not applied".

    overdue=True keeps only overdue tasks, overdue=False only tasks that are not.
    due_soon works the same way over the due_soon_days window.
    tags matches tasks carrying any of the given tags.
    """

    owner_id: str | None = None
    assignee_id: str | None = None
    category: str | None = None
    status: str | None = None
    priority: str | None = None
    overdue: bool | None = None
    due_soon: bool | None = None
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS
    tags: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> TaskFilter:
        data = data or {}
        raw_tags = _first(data, "tags", "tag")
        if isinstance(raw_tags, str):
            raw_tags = [raw_tags]
        overdue = _first(data, "overdue")
        due_soon = _first(data, "dueSoon", "due_soon")
        days = _first(data, "dueSoonDays", "due_soon_days")
        return cls(
            owner_id=_first(data, "ownerId", "owner_id"),
            assignee_id=_first(data, "assigneeId", "assignee_id"),
            category=_first(data, "category"),
            status=_first(data, "status"),
            priority=_first(data, "priority"),
            overdue=None if overdue is None else parse_bool(overdue),
            due_soon=None if due_soon is None else parse_bool(due_soon),
            due_soon_days=DEFAULT_DUE_SOON_DAYS if days is None else int(days),
            tags=tuple(raw_tags or ()),
        )


@dataclass(frozen=True, slots=True)
class CategoryStats:
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CategoryUsage:
    category: str
    count: int
    display_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "count": self.count, "displayName": self.display_name}


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    overdue: int
    due_soon: int
    by_status: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)

    @property
    def completion_rate(self) -> float:
        return round(self.completed / self.total * 100, 1) if self.total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "overdue": self.overdue,
            "dueSoon": self.due_soon,
            "completionRate": self.completion_rate,
            "byStatus": dict(self.by_status),
            "byPriority": dict(self.by_priority),
            "byCategory": dict(self.by_category),
        }
