# src/taskhub/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Optional config_local.py for safe local overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .core.flags import parse_bool

ENV_PREFIX = "TASKHUB"

STORAGE_BACKENDS = ("sqlite", "memory", "none")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return parse_bool(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_file: Path

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    storage_path: Path
    storage_version: str

    # ---- Query defaults ----
    due_soon_days: int
    most_used_limit: int

    # ---- Bootstrap ----
    seed_demo_data: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskManagementApp").strip() or "taskManagementApp"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskhub"))
        log_file = _env_path(_k("LOG_FILE"), data_dir / "taskhub.log")
        storage_backend = _env(_k("STORAGE_BACKEND"), "sqlite").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "sqlite"
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "taskhub.sqlite3")
        storage_version = _env(_k("STORAGE_VERSION"), "2.0").strip() or "2.0"

        due_soon_days = max(0, _env_int(_k("DUE_SOON_DAYS"), 3))
        most_used_limit = max(1, _env_int(_k("MOST_USED_LIMIT"), 5))

        seed_demo_data = _env_bool(_k("SEED_DEMO_DATA"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_file=log_file,
            data_dir=data_dir,
            storage_backend=storage_backend,
            storage_path=storage_path,
            storage_version=storage_version,
            due_soon_days=due_soon_days,
            most_used_limit=most_used_limit,
            seed_demo_data=seed_demo_data,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore
except ModuleNotFoundError:
    _config_local = None

if _config_local is not None:
    # Keep it explicit: only these names are honoured.
    if hasattr(_config_local, "STORAGE_BACKEND"):
        object.__setattr__(SETTINGS, "storage_backend", str(_config_local.STORAGE_BACKEND))
    if hasattr(_config_local, "SEED_DEMO_DATA"):
        object.__setattr__(SETTINGS, "seed_demo_data", bool(_config_local.SEED_DEMO_DATA))


def get_settings() -> Settings:
    return SETTINGS
