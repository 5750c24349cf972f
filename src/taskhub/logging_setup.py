# src/taskhub/logging_setup.py

"""
Process-wide logging for the taskhub console.

Two handlers hang off the root logger:
- stderr, filtered so the prompt stays readable
- a file (settings.log_file) that receives everything at DEBUG
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER_PREFIX = "taskhub."

# Our own loggers that log once per write; the console only shows their problems.
QUIET_APP_LOGGERS = ("taskhub.storage.", "taskhub.tasks.task_repository", "taskhub.users.user_repository")

# Marker set on handlers we install, so a second setup call replaces only ours.
_HANDLER_MARK = "_taskhub_handler"


class ConsoleFilter(logging.Filter):
    """
    taskhub records pass, except the quiet per-write loggers below WARNING.
    Third-party records (py.warnings included) only reach the console at ERROR+.
    """

    def __init__(self, quiet: tuple[str, ...] = QUIET_APP_LOGGERS) -> None:
        super().__init__()
        self._quiet = quiet

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith(APP_LOGGER_PREFIX):
            return record.levelno >= logging.ERROR
        if name.startswith(self._quiet):
            return record.levelno >= logging.WARNING
        return True


def _level(name: str | int, default: int) -> int:
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


def _install(handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARK, True)
    logging.getLogger().addHandler(handler)


def remove_handlers() -> None:
    """Detach and close the handlers installed by setup_logging()."""
    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)
            h.close()


def setup_logging(settings, *, file_level: int = logging.DEBUG) -> Path:
    """
    Configure console + file logging from settings (log_level, log_file).

    Safe to call again: previously installed taskhub handlers are replaced.
    Returns the log file path.
    """
    log_file = Path(settings.log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    remove_handlers()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    console = logging.StreamHandler(sys.stderr)
    console.addFilter(ConsoleFilter())
    _install(console, _level(settings.log_level, logging.INFO), fmt)
    _install(logging.FileHandler(str(log_file), encoding="utf-8"), file_level, fmt)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
    return log_file
