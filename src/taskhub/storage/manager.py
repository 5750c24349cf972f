# src/taskhub/storage/manager.py

from __future__ import annotations

import json
import logging
from typing import Any

from ..core.clock import to_iso, utc_now
from ..core.ports import KeyValueBackend

logger = logging.getLogger(__name__)

METADATA_ENTITY = "_metadata"
_CHECK_KEY = "__storage_test__"


class StorageManager:
    """
    Versioned persistence adapter for named entity collections.

    Layout (one backend key per entity, prefixed with the app name):
      <app>_<entity>   -> {"data": ..., "timestamp": ISO-8601, "version": str}
      <app>__metadata  -> envelope whose data is
                          {"version", "createdAt", "entities": {name: {"lastUpdated", "version"}}}

    Failure model:
    - backend missing or failing the start-up write check => unavailable: writes return False,
      reads return the caller's default, nothing raises
    - a backend error inside one call is logged and degrades that call the same way
    - a version mismatch on load is only logged; data is returned unchanged
    """

    def __init__(
        self,
        backend: KeyValueBackend | None,
        *,
        app_name: str = "taskManagementApp",
        version: str = "2.0",
    ) -> None:
        self.app_name = app_name
        self.version = version
        self._backend = backend
        self.is_available = self._check_availability()
        if self.is_available:
            self._initialize_metadata()
        else:
            logger.warning("Storage unavailable app=%s: data will not persist", app_name)

    # ---- public API ----

    def save(self, entity: str, data: Any) -> bool:
        if not self.is_available:
            return False
        try:
            envelope = self._write_envelope(entity, data)
            if entity != METADATA_ENTITY:
                self._update_metadata(entity, envelope["timestamp"])
            return True
        except Exception:
            logger.exception("Failed to save entity=%s", entity)
            return False

    def load(self, entity: str, default: Any = None) -> Any:
        if not self.is_available:
            return default
        try:
            envelope = self._read_envelope(self._key(entity))
        except Exception:
            logger.exception("Failed to load entity=%s", entity)
            return default

        if envelope is None:
            return default
        stored_version = envelope.get("version")
        if stored_version and stored_version != self.version:
            logger.warning(
                "Version mismatch for %s: stored=%s current=%s",
                entity,
                stored_version,
                self.version,
            )
        return envelope.get("data", default)

    def remove(self, entity: str) -> bool:
        if not self.is_available:
            return False
        try:
            self._backend.delete(self._key(entity))  # type: ignore[union-attr]
            if entity != METADATA_ENTITY:
                self._remove_from_metadata(entity)
            return True
        except Exception:
            logger.exception("Failed to remove entity=%s", entity)
            return False

    def exists(self, entity: str) -> bool:
        if not self.is_available:
            return False
        try:
            return self._backend.get(self._key(entity)) is not None  # type: ignore[union-attr]
        except Exception:
            logger.exception("Failed to check entity=%s", entity)
            return False

    def clear(self) -> bool:
        """Remove every key of this app's namespace (metadata included)."""
        if not self.is_available:
            return False
        try:
            for key in self._app_keys():
                self._backend.delete(key)  # type: ignore[union-attr]
            logger.info("Cleared storage namespace app=%s", self.app_name)
            return True
        except Exception:
            logger.exception("Failed to clear app data app=%s", self.app_name)
            return False

    def export_all(self) -> dict[str, Any] | None:
        if not self.is_available:
            return None
        try:
            snapshot: dict[str, Any] = {
                "appName": self.app_name,
                "version": self.version,
                "exportedAt": to_iso(utc_now()),
                "data": {},
            }
            for key in self._app_keys():
                envelope = self._read_envelope(key)
                if envelope is not None:
                    snapshot["data"][key] = envelope
            return snapshot
        except Exception:
            logger.exception("Failed to export data app=%s", self.app_name)
            return None

    def import_all(self, snapshot: Any) -> bool:
        if not self.is_available:
            return False
        if (
            not isinstance(snapshot, dict)
            or not snapshot.get("appName")
            or not isinstance(snapshot.get("data"), dict)
        ):
            logger.error("Invalid import data format")
            return False

        if snapshot["appName"] != self.app_name:
            logger.warning("Importing data from different app: %s", snapshot["appName"])

        try:
            for key, envelope in snapshot["data"].items():
                self._backend.set(str(key), json.dumps(envelope, ensure_ascii=False))  # type: ignore[union-attr]
            logger.info("Imported %d records app=%s", len(snapshot["data"]), self.app_name)
            return True
        except Exception:
            logger.exception("Failed to import data app=%s", self.app_name)
            return False

    def get_metadata(self) -> dict[str, Any]:
        meta = self.load(METADATA_ENTITY, None)
        if not isinstance(meta, dict):
            meta = self._fresh_metadata()
        meta.setdefault("entities", {})
        return meta

    def get_entities(self) -> list[str]:
        if not self.is_available:
            return []
        prefix = self._key("")
        try:
            names = [k[len(prefix):] for k in self._app_keys()]
        except Exception:
            logger.exception("Failed to list entities app=%s", self.app_name)
            return []
        return [n for n in names if n != METADATA_ENTITY]

    def get_storage_info(self) -> dict[str, Any]:
        if not self.is_available:
            return {"available": False}
        backend = self._backend
        try:
            total_size = 0
            app_size = 0
            app_keys = 0
            prefix = self._key("")
            all_keys = backend.keys()  # type: ignore[union-attr]
            for key in all_keys:
                value = backend.get(key) or ""  # type: ignore[union-attr]
                size = len(key) + len(value)
                total_size += size
                if key.startswith(prefix):
                    app_size += size
                    app_keys += 1
        except Exception as e:
            logger.exception("Failed to get storage info app=%s", self.app_name)
            return {"available": False, "error": str(e)}

        return {
            "available": True,
            "total_size": total_size,
            "app_size": app_size,
            "app_keys": app_keys,
            "total_keys": len(all_keys),
            "usage_percentage": round(app_size / total_size * 100, 2) if total_size else 0.0,
        }

    # ---- internals ----

    def _key(self, entity: str) -> str:
        return f"{self.app_name}_{entity}"

    def _app_keys(self) -> list[str]:
        prefix = self._key("")
        return [k for k in self._backend.keys() if k.startswith(prefix)]  # type: ignore[union-attr]

    def _check_availability(self) -> bool:
        if self._backend is None:
            return False
        try:
            self._backend.set(_CHECK_KEY, "test")
            self._backend.delete(_CHECK_KEY)
            return True
        except Exception:
            logger.exception("Storage backend write check failed")
            return False

    def _read_envelope(self, key: str) -> dict[str, Any] | None:
        raw = self._backend.get(key)  # type: ignore[union-attr]
        if raw is None:
            return None
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError(f"Stored value for {key} is not an envelope")
        return parsed

    def _write_envelope(self, entity: str, data: Any) -> dict[str, Any]:
        envelope = {"data": data, "timestamp": to_iso(utc_now()), "version": self.version}
        self._backend.set(self._key(entity), json.dumps(envelope, ensure_ascii=False))  # type: ignore[union-attr]
        return envelope

    def _fresh_metadata(self) -> dict[str, Any]:
        return {"version": self.version, "createdAt": to_iso(utc_now()), "entities": {}}

    def _initialize_metadata(self) -> None:
        if not self.exists(METADATA_ENTITY):
            self.save(METADATA_ENTITY, self._fresh_metadata())

    def _update_metadata(self, entity: str, timestamp: str) -> None:
        meta = self.get_metadata()
        meta["entities"][entity] = {"lastUpdated": timestamp, "version": self.version}
        self._write_envelope(METADATA_ENTITY, meta)

    def _remove_from_metadata(self, entity: str) -> None:
        meta = self.get_metadata()
        meta["entities"].pop(entity, None)
        self._write_envelope(METADATA_ENTITY, meta)
