# src/taskhub/tasks/task_repository.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from ..core.errors import ValidationError
from ..storage.manager import StorageManager
from .task_models import Category, Priority, Task, TaskStatus
from .task_queries import (
    DEFAULT_DUE_SOON_DAYS,
    CategoryStats,
    CategoryUsage,
    SortKey,
    SortOrder,
    TaskFilter,
    TaskStats,
)
from .task_updates import TaskUpdate

logger = logging.getLogger(__name__)

# Undated tasks sort after every real due date in ascending order.
_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)

_STATUS_ORDER = {s: i for i, s in enumerate(TaskStatus)}
_CATEGORY_ORDER = {c: i for i, c in enumerate(Category)}


def is_due_soon(task: Task, days: int) -> bool:
    """Not completed, not yet past due, and due within `days` days (today counts as 0)."""
    if task.is_completed or task.is_overdue:
        return False
    remaining = task.days_until_due
    return remaining is not None and 0 <= remaining <= days


def _sort_value(key: SortKey) -> Callable[[Task], Any]:
    if key is SortKey.PRIORITY:
        return lambda t: t.priority.rank
    if key is SortKey.DUE_DATE:
        return lambda t: t.due_date or _FAR_FUTURE
    if key is SortKey.STATUS:
        return lambda t: _STATUS_ORDER[t.status]
    if key is SortKey.CATEGORY:
        return lambda t: _CATEGORY_ORDER[t.category]
    if key is SortKey.TITLE:
        return lambda t: t.title.lower()
    if key is SortKey.UPDATED_AT:
        return lambda t: t.updated_at
    return lambda t: t.created_at


class TaskRepository:
    """
    Authoritative in-memory index of tasks, written through to storage.

    - the index is loaded once at construction (reload() re-reads it)
    - every mutating call persists the whole collection before returning
    - lookups never raise on a miss: None / [] / False
    """

    storage_key = "tasks"

    def __init__(self, storage: StorageManager) -> None:
        self._storage = storage
        self._tasks: dict[str, Task] = {}
        self._lock = threading.RLock()
        self.reload()

    def reload(self) -> None:
        with self._lock:
            self._tasks = {}
            raw = self._storage.load(self.storage_key, [])
            for item in raw if isinstance(raw, list) else []:
                try:
                    task = Task.from_dict(item)
                except (ValidationError, TypeError, ValueError, AttributeError):
                    logger.exception("Skipping unreadable task record: %r", item)
                    continue
                self._tasks[task.id] = task
            logger.info("Loaded %d tasks from storage", len(self._tasks))

    # ---- commands ----

    def create(self, data: dict[str, Any]) -> Task:
        task = Task(
            data.get("title"),  # type: ignore[arg-type]
            data.get("ownerId", data.get("owner_id")),  # type: ignore[arg-type]
            data.get("description"),
            assignee_id=data.get("assigneeId", data.get("assignee_id")),
            category=data.get("category") or Category.PERSONAL,
            priority=data.get("priority") or Priority.MEDIUM,
            status=data.get("status") or TaskStatus.PENDING,
            tags=data.get("tags"),
            due_date=data.get("dueDate", data.get("due_date")),
            estimated_hours=data.get("estimatedHours", data.get("estimated_hours")) or 0,
        )
        with self._lock:
            self._tasks[task.id] = task
            self._persist()
        logger.debug("Task created id=%s owner=%s title=%r", task.id, task.owner_id, task.title)
        return task

    def update(self, task_id: str, updates: Sequence[TaskUpdate]) -> Task | None:
        """
        Apply updates all-or-nothing: they are rehearsed on a copy first, so a
        rejected update leaves the indexed task and the store untouched.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None

            rehearsal = task.clone()
            for u in updates:
                u.apply(rehearsal)

            for u in updates:
                u.apply(task)
            self._persist()
        logger.debug("Task updated id=%s changes=%d", task_id, len(updates))
        return task

    def delete(self, task_id: str) -> bool:
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                return False
            self._persist()
        logger.debug("Task deleted id=%s", task_id)
        return True

    def delete_all_by_owner(self, owner_id: str) -> bool:
        with self._lock:
            doomed = [tid for tid, t in self._tasks.items() if t.owner_id == owner_id]
            if not doomed:
                return False
            for tid in doomed:
                del self._tasks[tid]
            self._persist()
        logger.info("Deleted %d tasks owner=%s", len(doomed), owner_id)
        return True

    # ---- lookups ----

    def find_by_id(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def find_all(self) -> list[Task]:
        return list(self._tasks.values())

    def find_by_owner(self, owner_id: str) -> list[Task]:
        return [t for t in self._tasks.values() if t.owner_id == owner_id]

    def find_by_assignee(self, assignee_id: str) -> list[Task]:
        return [t for t in self._tasks.values() if t.assignee_id == assignee_id]

    def find_by_category(self, category: Category | str) -> list[Task]:
        return [t for t in self._tasks.values() if t.category == category]

    def find_by_status(self, status: TaskStatus | str) -> list[Task]:
        return [t for t in self._tasks.values() if t.status == status]

    def find_by_priority(self, priority: Priority | str) -> list[Task]:
        return [t for t in self._tasks.values() if t.priority == priority]

    def find_by_tag(self, tag: str) -> list[Task]:
        return [t for t in self._tasks.values() if tag in t.tags]

    def find_overdue(self) -> list[Task]:
        return [t for t in self._tasks.values() if t.is_overdue]

    def find_due_soon(self, days: int = DEFAULT_DUE_SOON_DAYS) -> list[Task]:
        return [t for t in self._tasks.values() if is_due_soon(t, days)]

    # ---- queries ----

    def filter(self, criteria: TaskFilter | None = None) -> list[Task]:
        c = criteria or TaskFilter()
        wanted_tags = set(c.tags)

        def keep(t: Task) -> bool:
            if c.owner_id is not None and t.owner_id != c.owner_id:
                return False
            if c.assignee_id is not None and t.assignee_id != c.assignee_id:
                return False
            if c.category is not None and t.category != c.category:
                return False
            if c.status is not None and t.status != c.status:
                return False
            if c.priority is not None and t.priority != c.priority:
                return False
            if c.overdue is not None and t.is_overdue != c.overdue:
                return False
            if c.due_soon is not None and is_due_soon(t, c.due_soon_days) != c.due_soon:
                return False
            if wanted_tags and wanted_tags.isdisjoint(t.tags):
                return False
            return True

        return [t for t in self._tasks.values() if keep(t)]

    def sort(
        self,
        tasks: Iterable[Task],
        key: SortKey | str = SortKey.CREATED_AT,
        order: SortOrder | str = SortOrder.DESC,
    ) -> list[Task]:
        """Return a new stably sorted list; ties keep their input order in both directions."""
        sort_key = SortKey.parse(key)
        descending = SortOrder.parse(order) is SortOrder.DESC
        return sorted(tasks, key=_sort_value(sort_key), reverse=descending)

    def search(self, query: str) -> list[Task]:
        term = (query or "").strip().lower()
        if not term:
            return []
        return [
            t
            for t in self._tasks.values()
            if term in t.title.lower()
            or term in t.description.lower()
            or any(term in tag.lower() for tag in t.tags)
        ]

    # ---- aggregates ----

    def _scope(self, owner_id: str | None) -> list[Task]:
        return self.find_by_owner(owner_id) if owner_id else self.find_all()

    def get_stats(self, owner_id: str | None = None, *, due_soon_days: int = DEFAULT_DUE_SOON_DAYS) -> TaskStats:
        tasks = self._scope(owner_id)
        by_status = {s.value: 0 for s in TaskStatus}
        by_priority = {p.value: 0 for p in Priority}
        by_category = {c.value: 0 for c in Category}
        for t in tasks:
            by_status[t.status.value] += 1
            by_priority[t.priority.value] += 1
            by_category[t.category.value] += 1

        return TaskStats(
            total=len(tasks),
            completed=by_status[TaskStatus.COMPLETED.value],
            overdue=sum(1 for t in tasks if t.is_overdue),
            due_soon=sum(1 for t in tasks if is_due_soon(t, due_soon_days)),
            by_status=by_status,
            by_priority=by_priority,
            by_category=by_category,
        )

    def get_category_stats(self, owner_id: str | None = None) -> dict[str, CategoryStats]:
        counts = {c.value: [0, 0, 0, 0] for c in Category}
        for t in self._scope(owner_id):
            row = counts[t.category.value]
            row[0] += 1
            if t.is_completed:
                row[1] += 1
            else:
                row[2] += 1
            if t.is_overdue:
                row[3] += 1
        return {
            name: CategoryStats(total=r[0], completed=r[1], pending=r[2], overdue=r[3])
            for name, r in counts.items()
        }

    def get_most_used_categories(self, owner_id: str | None = None, limit: int = 5) -> list[CategoryUsage]:
        stats = self.get_category_stats(owner_id)
        # stats is in enum order and sorted() is stable, so ties keep enum order
        ranked = sorted(stats.items(), key=lambda kv: kv[1].total, reverse=True)
        return [
            CategoryUsage(category=name, count=s.total, display_name=Category(name).display_name)
            for name, s in ranked[: max(0, limit)]
        ]

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- internals ----

    def _persist(self) -> None:
        self._storage.save(self.storage_key, [t.to_dict() for t in self._tasks.values()])
