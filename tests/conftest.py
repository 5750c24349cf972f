# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskhub.cli.bootstrap import create_initial_state
from taskhub.core.state import AppState
from taskhub.storage.backends import InMemoryBackend
from taskhub.storage.manager import StorageManager
from taskhub.tasks.task_controller import TaskController
from taskhub.tasks.task_repository import TaskRepository
from taskhub.users.user_controller import UserController
from taskhub.users.user_models import User
from taskhub.users.user_repository import UserRepository


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskManagementApp",
        log_level="INFO",
        log_file=tmp_path / "data" / "taskhub.log",
        # Paths (tmp per test run)
        data_dir=tmp_path / "data",
        storage_backend="memory",
        storage_path=tmp_path / "data" / "taskhub.sqlite3",
        storage_version="2.0",
        # Query defaults
        due_soon_days=3,
        most_used_limit=5,
        # Bootstrap
        seed_demo_data=False,
    )


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def storage(backend: InMemoryBackend) -> StorageManager:
    return StorageManager(backend)


@pytest.fixture()
def users(storage: StorageManager) -> UserRepository:
    return UserRepository(storage)


@pytest.fixture()
def tasks(storage: StorageManager) -> TaskRepository:
    return TaskRepository(storage)


@pytest.fixture()
def alice(users: UserRepository) -> User:
    return users.create({"username": "alice", "email": "alice@example.com", "fullName": "Alice Johnson"})


@pytest.fixture()
def bob(users: UserRepository) -> User:
    return users.create({"username": "bob", "email": "bob@example.com", "fullName": "Bob Smith"})


@pytest.fixture()
def user_controller(users: UserRepository) -> UserController:
    return UserController(users)


@pytest.fixture()
def task_controller(tasks: TaskRepository, users: UserRepository) -> TaskController:
    return TaskController(tasks, users)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired through the real composition root.

    NOTE: we pass an in-memory backend so nothing touches the working directory.
    """
    return create_initial_state(settings=settings, backend=InMemoryBackend())
