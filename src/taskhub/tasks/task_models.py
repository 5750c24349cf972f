# src/taskhub/tasks/task_models.py

from __future__ import annotations

import copy
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeVar

from ..core.clock import DAY_SECONDS, parse_timestamp, to_iso, utc_now
from ..core.errors import ValidationError

E = TypeVar("E", bound=StrEnum)


class Category(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    STUDY = "study"
    HEALTH = "health"
    FINANCE = "finance"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY[self]


_CATEGORY_DISPLAY = {
    Category.WORK: "Work",
    Category.PERSONAL: "Personal",
    Category.STUDY: "Study",
    Category.HEALTH: "Health",
    Category.FINANCE: "Finance",
    Category.OTHER: "Other",
}


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3, Priority.URGENT: 4}


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Any status may move to any other; the only entry/exit side effect is the
    completed_at stamp handled by Task.update_status.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def coerce_enum(enum_cls: type[E], field: str, value: Any) -> E:
    """Strict conversion: unknown values raise ValidationError listing the valid set."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError.invalid_choice(field, value, [m.value for m in enum_cls]) from None


@dataclass(frozen=True, slots=True)
class TaskNote:
    id: str
    content: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "createdAt": to_iso(self.created_at)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskNote:
        created = parse_timestamp(data.get("createdAt")) or utc_now()
        return cls(id=str(data.get("id") or uuid.uuid4().hex), content=str(data.get("content", "")), created_at=created)


def _clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title", "Task title is required")
    return title.strip()


def _clean_hours(field: str, hours: Any) -> float:
    if isinstance(hours, bool) or not isinstance(hours, (int, float)) or math.isnan(hours):
        raise ValidationError(field, f"{field} must be a number, got {hours!r}")
    return float(hours)


def _clean_tag(tag: Any) -> str:
    if not isinstance(tag, str):
        raise ValidationError("tags", f"Tags must be strings, got {tag!r}")
    return tag.strip()


def clean_tag_list(tags: Any) -> list[str]:
    """A list or tuple of strings; a bare string is rejected rather than split into characters."""
    if tags is None:
        return []
    if not isinstance(tags, (list, tuple)):
        raise ValidationError("tags", f"Tags must be a list of strings, got {tags!r}")
    return [_clean_tag(t) for t in tags]


def _clean_description(description: Any) -> str:
    if description is None:
        return ""
    if not isinstance(description, str):
        raise ValidationError("description", f"Description must be a string, got {description!r}")
    return description.strip()


class Task:
    """
    A unit of work owned by one user and assigned to one user (the owner by default).

    State changes go through the named mutators only; each one validates its own
    input and touches updated_at. Container accessors (tags, notes, attachments)
    return copies.
    """

    def __init__(
        self,
        title: str,
        owner_id: str,
        description: str | None = None,
        *,
        assignee_id: str | None = None,
        category: Category | str = Category.PERSONAL,
        priority: Priority | str = Priority.MEDIUM,
        status: TaskStatus | str = TaskStatus.PENDING,
        tags: list[str] | None = None,
        due_date: datetime | str | None = None,
        estimated_hours: float = 0,
    ) -> None:
        if not isinstance(owner_id, str) or not owner_id.strip():
            raise ValidationError("owner_id", "Task owner_id is required")

        now = utc_now()
        self._id = f"task_{uuid.uuid4().hex}"
        self._title = _clean_title(title)
        self._description = _clean_description(description)
        self._owner_id = owner_id
        self._assignee_id = assignee_id or owner_id

        self._category = coerce_enum(Category, "category", category or Category.PERSONAL)
        self._priority = coerce_enum(Priority, "priority", priority or Priority.MEDIUM)
        self._status = coerce_enum(TaskStatus, "status", status or TaskStatus.PENDING)

        self._tags: list[str] = []
        for cleaned in clean_tag_list(tags):
            if cleaned and cleaned not in self._tags:
                self._tags.append(cleaned)

        self._due_date = self._parse_due(due_date)
        self._created_at = now
        self._updated_at = now
        self._completed_at = now if self._status is TaskStatus.COMPLETED else None

        self._estimated_hours = max(0.0, _clean_hours("estimated_hours", estimated_hours or 0))
        self._actual_hours = 0.0

        self._notes: list[TaskNote] = []
        self._attachments: list[dict[str, Any]] = []

    # ---- read access ----

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def assignee_id(self) -> str:
        return self._assignee_id

    @property
    def category(self) -> Category:
        return self._category

    @property
    def priority(self) -> Priority:
        return self._priority

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    @property
    def due_date(self) -> datetime | None:
        return self._due_date

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    @property
    def estimated_hours(self) -> float:
        return self._estimated_hours

    @property
    def actual_hours(self) -> float:
        return self._actual_hours

    @property
    def notes(self) -> list[TaskNote]:
        return list(self._notes)

    @property
    def attachments(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._attachments)

    # ---- derived state ----

    @property
    def is_completed(self) -> bool:
        return self._status is TaskStatus.COMPLETED

    @property
    def is_overdue(self) -> bool:
        if self._due_date is None or self.is_completed:
            return False
        return self._due_date < utc_now()

    @property
    def days_until_due(self) -> int | None:
        if self._due_date is None:
            return None
        delta = (self._due_date - utc_now()).total_seconds()
        return math.ceil(delta / DAY_SECONDS)

    @property
    def progress_percentage(self) -> float:
        if self._estimated_hours <= 0:
            return 0.0
        return min(100.0, self._actual_hours / self._estimated_hours * 100.0)

    def is_visible_to(self, user_id: str | None) -> bool:
        return user_id is not None and user_id in (self._owner_id, self._assignee_id)

    # ---- mutators ----

    def update_title(self, title: str) -> None:
        self._title = _clean_title(title)
        self._touch()

    def update_description(self, description: str | None) -> None:
        self._description = _clean_description(description)
        self._touch()

    def update_category(self, category: Category | str) -> None:
        self._category = coerce_enum(Category, "category", category)
        self._touch()

    def update_priority(self, priority: Priority | str) -> None:
        self._priority = coerce_enum(Priority, "priority", priority)
        self._touch()

    def update_status(self, status: TaskStatus | str) -> None:
        new_status = coerce_enum(TaskStatus, "status", status)
        if new_status is TaskStatus.COMPLETED:
            if self._status is not TaskStatus.COMPLETED or self._completed_at is None:
                self._completed_at = utc_now()
        else:
            self._completed_at = None
        self._status = new_status
        self._touch()

    def set_due_date(self, due_date: datetime | str | None) -> None:
        self._due_date = self._parse_due(due_date)
        self._touch()

    def assign_to(self, user_id: str | None) -> None:
        self._assignee_id = user_id or self._owner_id
        self._touch()

    def add_tag(self, tag: str) -> bool:
        cleaned = _clean_tag(tag)
        if not cleaned or cleaned in self._tags:
            return False
        self._tags.append(cleaned)
        self._touch()
        return True

    def remove_tag(self, tag: str) -> bool:
        if tag not in self._tags:
            return False
        self._tags.remove(tag)
        self._touch()
        return True

    def add_time_spent(self, hours: float) -> None:
        value = _clean_hours("actual_hours", hours)
        if value > 0:
            self._actual_hours += value
            self._touch()

    def set_estimated_hours(self, hours: float) -> None:
        self._estimated_hours = max(0.0, _clean_hours("estimated_hours", hours))
        self._touch()

    def add_note(self, content: str) -> TaskNote | None:
        if not isinstance(content, str) or not content.strip():
            return None
        note = TaskNote(id=uuid.uuid4().hex, content=content.strip(), created_at=utc_now())
        self._notes.append(note)
        self._touch()
        return note

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "title": self._title,
            "description": self._description,
            "ownerId": self._owner_id,
            "assigneeId": self._assignee_id,
            "category": self._category.value,
            "tags": list(self._tags),
            "priority": self._priority.value,
            "status": self._status.value,
            "dueDate": to_iso(self._due_date),
            "createdAt": to_iso(self._created_at),
            "updatedAt": to_iso(self._updated_at),
            "completedAt": to_iso(self._completed_at),
            "estimatedHours": self._estimated_hours,
            "actualHours": self._actual_hours,
            "notes": [n.to_dict() for n in self._notes],
            "attachments": copy.deepcopy(self._attachments),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        task = cls(
            data.get("title", ""),
            data.get("ownerId", ""),
            data.get("description"),
            assignee_id=data.get("assigneeId"),
            category=data.get("category") or Category.PERSONAL,
            priority=data.get("priority") or Priority.MEDIUM,
            status=data.get("status") or TaskStatus.PENDING,
            tags=data.get("tags") or [],
            due_date=data.get("dueDate"),
            estimated_hours=data.get("estimatedHours") or 0,
        )
        if data.get("id"):
            task._id = str(data["id"])
        task._created_at = parse_timestamp(data.get("createdAt")) or task._created_at
        task._updated_at = parse_timestamp(data.get("updatedAt")) or task._created_at

        completed_at = parse_timestamp(data.get("completedAt"))
        if task.is_completed:
            task._completed_at = completed_at or task._updated_at
        else:
            task._completed_at = None

        task._actual_hours = max(0.0, float(data.get("actualHours") or 0))
        task._notes = [TaskNote.from_dict(n) for n in data.get("notes") or [] if isinstance(n, dict)]
        task._attachments = copy.deepcopy(list(data.get("attachments") or []))
        return task

    def clone(self) -> Task:
        return Task.from_dict(self.to_dict())

    # ---- internals ----

    @staticmethod
    def _parse_due(value: datetime | str | None) -> datetime | None:
        try:
            return parse_timestamp(value)
        except (TypeError, ValueError):
            raise ValidationError("due_date", f"Invalid due_date: {value!r}") from None

    def _touch(self) -> None:
        self._updated_at = utc_now()

    def __repr__(self) -> str:
        return (
            f"Task(id={self._id!r}, title={self._title!r}, status={self._status.value!r}, "
            f"priority={self._priority.value!r}, owner_id={self._owner_id!r})"
        )
