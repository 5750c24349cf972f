# src/taskhub/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the storage backend, repositories and controllers into AppState,
- seeds demo data into an empty store (optional),
- moves whole-namespace snapshots to and from JSON files.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import timedelta
from pathlib import Path
from typing import Any

from ..config import get_settings
from ..core.clock import utc_now
from ..core.ports import KeyValueBackend
from ..core.state import AppState
from ..storage.backends import InMemoryBackend, SqliteBackend
from ..storage.manager import StorageManager
from ..tasks.task_controller import TaskController
from ..tasks.task_repository import TaskRepository
from ..users.user_controller import UserController
from ..users.user_repository import UserRepository

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"username": "alice", "email": "alice@example.com", "fullName": "Alice Johnson"},
    {"username": "bob", "email": "bob@example.com", "fullName": "Bob Smith"},
]


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def build_backend(settings) -> KeyValueBackend | None:
    kind = getattr(settings, "storage_backend", "sqlite")
    if kind == "none":
        return None
    if kind == "memory":
        return InMemoryBackend()
    return SqliteBackend(settings.storage_path)


def create_initial_state(*, settings=None, backend: KeyValueBackend | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the backend) injectable makes the app easy to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if backend is None:
        _ensure_local_dirs(settings)
        backend = build_backend(settings)

    storage = StorageManager(backend, app_name=settings.app_name, version=settings.storage_version)
    users = UserRepository(storage)
    tasks = TaskRepository(storage)

    state = AppState(
        settings=settings,
        storage=storage,
        users=users,
        tasks=tasks,
        user_controller=UserController(users),
        task_controller=TaskController(
            tasks,
            users,
            due_soon_days=settings.due_soon_days,
            most_used_limit=settings.most_used_limit,
        ),
    )

    if getattr(settings, "seed_demo_data", False) and len(users) == 0:
        seed_demo_data(state)
    return state


def seed_demo_data(state: AppState) -> None:
    """Create a couple of users and tasks so a fresh install has something to show."""
    alice, bob = (state.users.create(u) for u in DEMO_USERS)
    now = utc_now()
    samples: list[dict[str, Any]] = [
        {
            "title": "Prepare quarterly report",
            "description": "Collect numbers from finance and draft the summary",
            "ownerId": alice.id,
            "category": "work",
            "priority": "high",
            "dueDate": now + timedelta(days=2),
            "tags": ["report", "q3"],
            "estimatedHours": 6,
        },
        {
            "title": "Book dentist appointment",
            "ownerId": alice.id,
            "category": "health",
            "priority": "medium",
            "dueDate": now - timedelta(days=1),
        },
        {
            "title": "Review pull requests",
            "ownerId": alice.id,
            "assigneeId": bob.id,
            "category": "work",
            "priority": "urgent",
            "tags": ["code-review"],
        },
        {
            "title": "Read chapter 4",
            "ownerId": bob.id,
            "category": "study",
            "priority": "low",
        },
    ]
    for data in samples:
        state.tasks.create(data)
    logger.info("Seeded demo data: %d users, %d tasks", len(DEMO_USERS), len(samples))


def export_to_file(state: AppState, path: str | Path) -> bool:
    snapshot = state.storage.export_all()
    if snapshot is None:
        return False
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, path)
        with contextlib.suppress(OSError):
            # Best-effort: exports contain emails, keep the file private on disk.
            os.chmod(path, 0o600)
    except OSError:
        logger.exception("Failed to write export to %s", path)
        return False
    logger.info("Exported %d records to %s", len(snapshot["data"]), path)
    return True


def import_from_file(state: AppState, path: str | Path) -> bool:
    path = Path(path)
    try:
        snapshot = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError):
        logger.exception("Failed to read import file %s", path)
        return False
    if not state.storage.import_all(snapshot):
        return False
    state.users.reload()
    state.tasks.reload()
    return True
