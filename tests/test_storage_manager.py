# tests/test_storage_manager.py

from __future__ import annotations

import json
import logging
from pathlib import Path

from taskhub.storage.backends import InMemoryBackend, SqliteBackend
from taskhub.storage.manager import METADATA_ENTITY, StorageManager

from .fakes import FlakyBackend


def test_save_wraps_data_in_versioned_envelope(storage: StorageManager, backend: InMemoryBackend) -> None:
    assert storage.save("tasks", [{"id": "t1"}]) is True

    raw = json.loads(backend.get("taskManagementApp_tasks") or "")
    assert raw["data"] == [{"id": "t1"}]
    assert raw["version"] == "2.0"
    assert raw["timestamp"].endswith("Z")
    assert storage.load("tasks") == [{"id": "t1"}]


def test_load_missing_returns_default(storage: StorageManager) -> None:
    assert storage.load("nope") is None
    assert storage.load("nope", []) == []
    assert storage.exists("nope") is False


def test_metadata_tracks_saved_and_removed_entities(storage: StorageManager) -> None:
    meta = storage.get_metadata()
    assert meta["version"] == "2.0"
    assert meta["entities"] == {}

    storage.save("users", [])
    storage.save("tasks", [])
    entities = storage.get_metadata()["entities"]
    assert set(entities) == {"users", "tasks"}
    assert entities["tasks"]["version"] == "2.0"

    assert storage.remove("users") is True
    assert set(storage.get_metadata()["entities"]) == {"tasks"}
    assert storage.exists("users") is False


def test_get_entities_excludes_metadata(storage: StorageManager) -> None:
    storage.save("tasks", [])
    assert storage.exists(METADATA_ENTITY)
    assert storage.get_entities() == ["tasks"]


def test_version_mismatch_is_logged_and_data_returned(backend: InMemoryBackend, caplog) -> None:
    old = StorageManager(backend, version="1.0")
    old.save("tasks", [{"id": "legacy"}])

    current = StorageManager(backend, version="2.0")
    with caplog.at_level(logging.WARNING, logger="taskhub.storage.manager"):
        assert current.load("tasks") == [{"id": "legacy"}]
    assert "Version mismatch" in caplog.text


def test_missing_backend_degrades_without_raising() -> None:
    storage = StorageManager(None)

    assert storage.is_available is False
    assert storage.save("tasks", [1]) is False
    assert storage.load("tasks", "fallback") == "fallback"
    assert storage.remove("tasks") is False
    assert storage.exists("tasks") is False
    assert storage.clear() is False
    assert storage.export_all() is None
    assert storage.import_all({"appName": "x", "data": {}}) is False
    assert storage.get_entities() == []
    assert storage.get_storage_info() == {"available": False}


def test_failing_write_check_marks_storage_unavailable() -> None:
    storage = StorageManager(FlakyBackend(broken=True))
    assert storage.is_available is False
    assert storage.save("tasks", []) is False


def test_backend_failure_mid_session_degrades_per_call() -> None:
    backend = FlakyBackend()
    storage = StorageManager(backend)
    assert storage.save("tasks", ["a"]) is True

    backend.broken = True
    assert storage.save("tasks", ["b"]) is False
    assert storage.load("tasks", []) == []
    assert storage.exists("tasks") is False
    assert storage.export_all() is None

    backend.broken = False
    assert storage.load("tasks") == ["a"]


def test_clear_only_touches_own_namespace(storage: StorageManager, backend: InMemoryBackend) -> None:
    backend.set("someOtherApp_tasks", "{}")
    storage.save("tasks", [])

    assert storage.clear() is True
    assert backend.keys() == ["someOtherApp_tasks"]


def test_export_import_round_trip_between_stores() -> None:
    source = StorageManager(InMemoryBackend())
    source.save("users", [{"id": "u1"}])
    source.save("tasks", [{"id": "t1"}, {"id": "t2"}])

    snapshot = source.export_all()
    assert snapshot is not None
    assert snapshot["appName"] == "taskManagementApp"
    assert snapshot["version"] == "2.0"
    assert set(snapshot["data"]) == {
        "taskManagementApp_users",
        "taskManagementApp_tasks",
        "taskManagementApp__metadata",
    }

    target = StorageManager(InMemoryBackend())
    assert target.import_all(json.loads(json.dumps(snapshot))) is True
    assert target.load("tasks") == [{"id": "t1"}, {"id": "t2"}]
    assert target.load("users") == [{"id": "u1"}]
    # envelopes are written verbatim, timestamps included
    assert target.export_all()["data"] == snapshot["data"]


def test_import_rejects_malformed_snapshots(storage: StorageManager) -> None:
    assert storage.import_all(None) is False
    assert storage.import_all({"data": {}}) is False
    assert storage.import_all({"appName": "taskManagementApp", "data": []}) is False


def test_import_from_other_app_is_accepted_with_warning(storage: StorageManager, caplog) -> None:
    snapshot = {"appName": "otherApp", "data": {"taskManagementApp_notes": {"data": [], "version": "2.0"}}}
    with caplog.at_level(logging.WARNING, logger="taskhub.storage.manager"):
        assert storage.import_all(snapshot) is True
    assert "different app" in caplog.text
    assert storage.load("notes") == []


def test_storage_info_reports_namespace_usage(storage: StorageManager, backend: InMemoryBackend) -> None:
    backend.set("foreign", "x" * 100)
    storage.save("tasks", [])

    info = storage.get_storage_info()
    assert info["available"] is True
    assert info["total_keys"] == 3
    assert info["app_keys"] == 2
    assert 0 < info["app_size"] < info["total_size"]
    assert 0 < info["usage_percentage"] < 100


def test_sqlite_backend_persists_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"
    first = StorageManager(SqliteBackend(db))
    first.save("tasks", [{"id": "t1"}])

    second = StorageManager(SqliteBackend(db))
    assert second.load("tasks") == [{"id": "t1"}]
    assert "tasks" in second.get_entities()


def test_sqlite_backend_upserts_and_deletes(tmp_path: Path) -> None:
    backend = SqliteBackend(tmp_path / "kv.sqlite3")
    backend.set("k", "v1")
    backend.set("k", "v2")
    assert backend.get("k") == "v2"
    assert backend.keys() == ["k"]

    backend.delete("k")
    assert backend.get("k") is None
    backend.delete("k")


def test_storage_info_ignores_apps_sharing_a_name_prefix(storage: StorageManager, backend: InMemoryBackend) -> None:
    backend.set("taskManagementApp2_tasks", "[]")
    backend.set("taskManagementAppX", "{}")
    storage.save("tasks", [])

    info = storage.get_storage_info()
    assert info["total_keys"] == 4
    assert info["app_keys"] == 2

    storage.clear()
    assert backend.get("taskManagementApp2_tasks") == "[]"
