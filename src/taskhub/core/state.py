# src/taskhub/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..storage.manager import StorageManager
from ..tasks.task_controller import TaskController
from ..tasks.task_repository import TaskRepository
from ..users.user_controller import UserController
from ..users.user_repository import UserRepository


@dataclass
class AppState:
    # Settings (or a test stand-in) the state was built from.
    settings: object

    storage: StorageManager
    users: UserRepository
    tasks: TaskRepository
    user_controller: UserController
    task_controller: TaskController

    # Front-end session: who is "logged in" at the console. Controllers never read this.
    current_user_id: str | None = None
