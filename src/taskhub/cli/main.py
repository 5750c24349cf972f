# src/taskhub/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry as command_registry
from ..config import get_settings
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)

EXIT_WORDS = {"/exit", "/quit", "/q"}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _prompt(state: AppState) -> str:
    user = state.users.find_by_id(state.current_user_id) if state.current_user_id else None
    return f"{user.username if user else 'anonymous'}> "


def run_console_loop(state: AppState) -> None:
    logger.info("Console started (users=%d tasks=%d).", len(state.users), len(state.tasks))
    print(f"[{_ts_local()}] Type /help for commands, /login <username> to start, /exit to quit.\n")

    while True:
        try:
            line = input(_prompt(state)).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if not line:
            continue
        if line.lower() in EXIT_WORDS:
            return

        reply = command_registry.handle(state, line)
        if reply is None:
            reply = "Commands start with '/'. Use /help to list them."
        print(reply)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(settings)
    logger.info("Starting %s (storage=%s log=%s)...", settings.app_name, settings.storage_backend, log_file)

    state = create_initial_state(settings=settings)
    if not state.storage.is_available:
        logger.warning("Running without persistence: changes are lost on exit.")

    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
