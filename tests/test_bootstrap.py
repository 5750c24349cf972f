# tests/test_bootstrap.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskhub.cli.bootstrap import build_backend, create_initial_state, export_to_file, import_from_file
from taskhub.config import Settings
from taskhub.core.flags import parse_bool
from taskhub.storage.backends import InMemoryBackend, SqliteBackend


def test_build_backend_follows_settings(settings) -> None:
    settings.storage_backend = "none"
    assert build_backend(settings) is None

    settings.storage_backend = "memory"
    assert isinstance(build_backend(settings), InMemoryBackend)

    settings.storage_backend = "sqlite"
    backend = build_backend(settings)
    assert isinstance(backend, SqliteBackend)
    assert backend.db_path == settings.storage_path


def test_seeding_happens_once(settings) -> None:
    settings.seed_demo_data = True
    settings.storage_backend = "sqlite"

    state = create_initial_state(settings=settings)
    assert len(state.users) == 2
    assert len(state.tasks) == 4
    assert state.storage.is_available

    # same database file: already populated, nothing is added
    again = create_initial_state(settings=settings)
    assert len(again.users) == 2
    assert len(again.tasks) == 4


def test_no_backend_runs_without_persistence(settings) -> None:
    settings.storage_backend = "none"
    state = create_initial_state(settings=settings)

    assert not state.storage.is_available
    result = state.user_controller.register({"username": "alice", "email": "alice@example.com"})
    assert result.success
    assert len(state.users) == 1


def test_export_file_is_a_snapshot(state, tmp_path: Path) -> None:
    state.users.create({"username": "alice", "email": "alice@example.com"})
    path = tmp_path / "out.json"

    assert export_to_file(state, path) is True
    snapshot = json.loads(path.read_text("utf-8"))
    assert snapshot["appName"] == "taskManagementApp"
    assert "taskManagementApp_users" in snapshot["data"]


def test_import_rejects_non_json(state, tmp_path: Path) -> None:
    path = tmp_path / "garbage.json"
    path.write_text("not json", "utf-8")
    assert import_from_file(state, path) is False


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    for name in ("TASKHUB_APP_NAME", "TASKHUB_STORAGE_PATH", "TASKHUB_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TASKHUB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKHUB_STORAGE_BACKEND", "postgres")
    monkeypatch.setenv("TASKHUB_DUE_SOON_DAYS", "seven")
    monkeypatch.setenv("TASKHUB_MOST_USED_LIMIT", "2")
    monkeypatch.setenv("TASKHUB_SEED_DEMO_DATA", "no")

    s = Settings.from_env()
    assert s.data_dir == tmp_path
    assert s.storage_path == tmp_path / "taskhub.sqlite3"
    assert s.log_file == tmp_path / "taskhub.log"
    assert s.storage_backend == "sqlite"
    assert s.due_soon_days == 3
    assert s.most_used_limit == 2
    assert s.seed_demo_data is False
    assert s.app_name == "taskManagementApp"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("false", False),
        ("0", False),
        ("", False),
        ("no", False),
        (" yes ", True),
        ("ON", True),
        (True, True),
        (False, False),
        (0, False),
    ],
)
def test_parse_bool(raw, expected: bool) -> None:
    assert parse_bool(raw) is expected
