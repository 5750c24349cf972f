# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKHUB_APP_NAME": "Storage namespace prefix (default: taskManagementApp).",
    "TASKHUB_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKHUB_LOG_FILE": "Log file receiving everything at DEBUG (default: <data_dir>/taskhub.log).",
    # Storage
    "TASKHUB_DATA_DIR": "Local data directory for the database and logs (default: .local/taskhub).",
    "TASKHUB_STORAGE_BACKEND": "sqlite | memory | none (default: sqlite).",
    "TASKHUB_STORAGE_PATH": "SQLite file path (default: <data_dir>/taskhub.sqlite3).",
    "TASKHUB_STORAGE_VERSION": "Schema version written into every envelope (default: 2.0).",
    # Query defaults
    "TASKHUB_DUE_SOON_DAYS": "Window for 'due soon' queries and stats (default: 3).",
    "TASKHUB_MOST_USED_LIMIT": "Length of the most-used categories ranking (default: 5).",
    # Bootstrap
    "TASKHUB_SEED_DEMO_DATA": "Create demo users/tasks when the store is empty (true/false).",
}
