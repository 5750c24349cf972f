# src/taskhub/tasks/task_controller.py

"""
Access-controlled task operations.

Permission rules:
- create: any authenticated actor (who becomes the owner)
- read / toggle status: owner or assignee
- update / delete: owner only
- assigning to someone else requires that user to exist, checked before the repository is touched

Every method returns a Result envelope and never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.access import AUTH_REQUIRED, resolve_actor
from ..core.ports import TaskRepo, UserRepo
from ..core.result import Result, folds_errors
from .task_models import TaskStatus
from .task_queries import DEFAULT_DUE_SOON_DAYS, SortKey, SortOrder, TaskFilter
from .task_updates import SetStatus, assignee_of, parse_task_updates

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
NO_ACCESS = "You do not have access to this task"
OWNER_ONLY_UPDATE = "Only the owner can modify this task"
OWNER_ONLY_DELETE = "Only the owner can delete this task"
ASSIGNEE_NOT_FOUND = "Assigned user not found"
TITLE_REQUIRED = "Task title is required"
EMPTY_QUERY = "Search query must not be empty"


class TaskController:
    def __init__(
        self,
        tasks: TaskRepo,
        users: UserRepo,
        *,
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
        most_used_limit: int = 5,
    ) -> None:
        self._tasks = tasks
        self._users = users
        self._due_soon_days = due_soon_days
        self._most_used_limit = most_used_limit

    @folds_errors
    def create_task(self, actor_id: str | None, data: Mapping[str, Any]) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            return Result.fail(TITLE_REQUIRED)

        assignee_id = data.get("assigneeId", data.get("assignee_id")) or actor.id
        if assignee_id != actor.id and self._users.find_by_id(assignee_id) is None:
            return Result.fail(ASSIGNEE_NOT_FOUND)

        payload = {**data, "ownerId": actor.id, "assigneeId": assignee_id}
        payload.pop("owner_id", None)
        payload.pop("assignee_id", None)
        task = self._tasks.create(payload)
        logger.info("Task created id=%s by=%s", task.id, actor.id)
        return Result.ok(task, message=f'Task "{task.title}" created')

    @folds_errors
    def get_tasks(self, actor_id: str | None, filters: Mapping[str, Any] | None = None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        filters = dict(filters or {})
        filters.pop("owner_id", None)
        filters["ownerId"] = actor.id
        filters.setdefault("dueSoonDays", self._due_soon_days)

        tasks = self._tasks.filter(TaskFilter.from_mapping(filters))
        tasks = self._tasks.sort(
            tasks,
            SortKey.parse(filters.get("sortBy")),
            SortOrder.parse(filters.get("sortOrder")),
        )
        return Result.ok(tasks, count=len(tasks))

    @folds_errors
    def get_task(self, actor_id: str | None, task_id: str) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        task = self._tasks.find_by_id(task_id)
        if task is None:
            return Result.fail(TASK_NOT_FOUND)
        if not task.is_visible_to(actor.id):
            return Result.fail(NO_ACCESS)
        return Result.ok(task)

    @folds_errors
    def update_task(self, actor_id: str | None, task_id: str, updates: Mapping[str, Any]) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        task = self._tasks.find_by_id(task_id)
        if task is None:
            return Result.fail(TASK_NOT_FOUND)
        if task.owner_id != actor.id:
            return Result.fail(OWNER_ONLY_UPDATE)

        changes = parse_task_updates(updates)
        new_assignee = assignee_of(changes)
        if new_assignee is not None and self._users.find_by_id(new_assignee) is None:
            return Result.fail(ASSIGNEE_NOT_FOUND)

        updated = self._tasks.update(task_id, changes)
        if updated is None:
            return Result.fail(TASK_NOT_FOUND)
        return Result.ok(updated, message="Task updated")

    @folds_errors
    def delete_task(self, actor_id: str | None, task_id: str) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        task = self._tasks.find_by_id(task_id)
        if task is None:
            return Result.fail(TASK_NOT_FOUND)
        if task.owner_id != actor.id:
            return Result.fail(OWNER_ONLY_DELETE)

        if not self._tasks.delete(task_id):
            return Result.fail("Failed to delete task")
        logger.info("Task deleted id=%s by=%s", task_id, actor.id)
        return Result.ok(message=f'Task "{task.title}" deleted')

    @folds_errors
    def clear_all_tasks(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        removed = self._tasks.delete_all_by_owner(actor.id)
        return Result.ok(message="All tasks deleted" if removed else "No tasks to delete")

    @folds_errors
    def toggle_task_status(self, actor_id: str | None, task_id: str) -> Result:
        """Flip completed <-> pending. Assignees may do this too."""
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)

        task = self._tasks.find_by_id(task_id)
        if task is None:
            return Result.fail(TASK_NOT_FOUND)
        if not task.is_visible_to(actor.id):
            return Result.fail(NO_ACCESS)

        new_status = TaskStatus.PENDING if task.is_completed else TaskStatus.COMPLETED
        updated = self._tasks.update(task_id, [SetStatus(new_status)])
        label = "completed" if new_status is TaskStatus.COMPLETED else "reopened"
        return Result.ok(updated, message=f"Task {label}")

    @folds_errors
    def search_tasks(self, actor_id: str | None, query: str) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        if not query or not query.strip():
            return Result.fail(EMPTY_QUERY)

        hits = [t for t in self._tasks.search(query) if t.is_visible_to(actor.id)]
        return Result.ok(hits, count=len(hits), query=query)

    @folds_errors
    def get_task_stats(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        return Result.ok(self._tasks.get_stats(actor.id, due_soon_days=self._due_soon_days))

    @folds_errors
    def get_category_stats(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        return Result.ok(self._tasks.get_category_stats(actor.id))

    @folds_errors
    def get_most_used_categories(self, actor_id: str | None, limit: int | None = None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        ranking = self._tasks.get_most_used_categories(actor.id, limit or self._most_used_limit)
        return Result.ok(ranking, count=len(ranking))

    @folds_errors
    def get_overdue_tasks(self, actor_id: str | None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        tasks = [t for t in self._tasks.find_overdue() if t.is_visible_to(actor.id)]
        return Result.ok(tasks, count=len(tasks))

    @folds_errors
    def get_tasks_due_soon(self, actor_id: str | None, days: int | None = None) -> Result:
        actor = resolve_actor(self._users, actor_id)
        if actor is None:
            return Result.fail(AUTH_REQUIRED)
        window = self._due_soon_days if days is None else days
        tasks = [t for t in self._tasks.find_due_soon(window) if t.is_visible_to(actor.id)]
        return Result.ok(tasks, count=len(tasks))
