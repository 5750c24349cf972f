# src/taskhub/tasks/task_updates.py

"""
Explicit task field changes.

TaskRepository.update() accepts a sequence of these instead of an arbitrary
mapping; each variant knows the single mutator it is allowed to call.
parse_task_updates() is the adapter for plain dict input (forms, CLI, JSON).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .task_models import Category, Priority, Task, TaskStatus, clean_tag_list


@dataclass(frozen=True, slots=True)
class SetTitle:
    title: str

    def apply(self, task: Task) -> None:
        task.update_title(self.title)


@dataclass(frozen=True, slots=True)
class SetDescription:
    description: str | None

    def apply(self, task: Task) -> None:
        task.update_description(self.description)


@dataclass(frozen=True, slots=True)
class SetCategory:
    category: Category | str

    def apply(self, task: Task) -> None:
        task.update_category(self.category)


@dataclass(frozen=True, slots=True)
class SetPriority:
    priority: Priority | str

    def apply(self, task: Task) -> None:
        task.update_priority(self.priority)


@dataclass(frozen=True, slots=True)
class SetStatus:
    status: TaskStatus | str

    def apply(self, task: Task) -> None:
        task.update_status(self.status)


@dataclass(frozen=True, slots=True)
class SetDueDate:
    due_date: datetime | str | None

    def apply(self, task: Task) -> None:
        task.set_due_date(self.due_date)


@dataclass(frozen=True, slots=True)
class SetEstimatedHours:
    hours: float

    def apply(self, task: Task) -> None:
        task.set_estimated_hours(self.hours)


@dataclass(frozen=True, slots=True)
class AssignTo:
    user_id: str | None

    def apply(self, task: Task) -> None:
        task.assign_to(self.user_id)


@dataclass(frozen=True, slots=True)
class AddTag:
    tag: str

    def apply(self, task: Task) -> None:
        task.add_tag(self.tag)


@dataclass(frozen=True, slots=True)
class RemoveTag:
    tag: str

    def apply(self, task: Task) -> None:
        task.remove_tag(self.tag)


@dataclass(frozen=True, slots=True)
class SetTags:
    """Replace the tag set, keeping surviving tags in their current order."""

    tags: tuple[str, ...]

    def apply(self, task: Task) -> None:
        wanted = [t.strip() for t in self.tags if isinstance(t, str)]
        for tag in task.tags:
            if tag not in wanted:
                task.remove_tag(tag)
        for tag in self.tags:
            task.add_tag(tag)


@dataclass(frozen=True, slots=True)
class AddTimeSpent:
    hours: float

    def apply(self, task: Task) -> None:
        task.add_time_spent(self.hours)


@dataclass(frozen=True, slots=True)
class AddNote:
    content: str

    def apply(self, task: Task) -> None:
        task.add_note(self.content)


TaskUpdate = (
    SetTitle
    | SetDescription
    | SetCategory
    | SetPriority
    | SetStatus
    | SetDueDate
    | SetEstimatedHours
    | AssignTo
    | AddTag
    | RemoveTag
    | SetTags
    | AddTimeSpent
    | AddNote
)

# dict key -> update variant (camelCase as on the wire, snake_case as in Python)
_SIMPLE_KEYS: dict[str, type] = {
    "title": SetTitle,
    "description": SetDescription,
    "category": SetCategory,
    "priority": SetPriority,
    "status": SetStatus,
    "dueDate": SetDueDate,
    "due_date": SetDueDate,
    "estimatedHours": SetEstimatedHours,
    "estimated_hours": SetEstimatedHours,
    "assigneeId": AssignTo,
    "assignee_id": AssignTo,
    "timeSpent": AddTimeSpent,
    "time_spent": AddTimeSpent,
    "note": AddNote,
}


def parse_task_updates(data: Mapping[str, Any]) -> list[TaskUpdate]:
    """
    Convert a partial-update mapping into explicit updates, in a fixed order.

    Unknown keys are ignored. "tags" replaces the tag set; "addTags" and
    "removeTags" take lists of individual tags. Tag values that are not lists
    or tuples raise ValidationError.
    """
    updates: list[TaskUpdate] = []
    for key, variant in _SIMPLE_KEYS.items():
        if key in data:
            updates.append(variant(data[key]))

    if data.get("tags") is not None:
        updates.append(SetTags(tuple(clean_tag_list(data["tags"]))))
    for key in ("addTags", "add_tags"):
        for tag in clean_tag_list(data.get(key)):
            updates.append(AddTag(tag))
    for key in ("removeTags", "remove_tags"):
        for tag in clean_tag_list(data.get(key)):
            updates.append(RemoveTag(tag))
    return updates


def assignee_of(updates: list[TaskUpdate]) -> str | None:
    """The last non-empty assignee an update list would set, if any."""
    target: str | None = None
    for u in updates:
        if isinstance(u, AssignTo) and u.user_id:
            target = u.user_id
    return target
