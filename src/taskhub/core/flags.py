# src/taskhub/core/flags.py

from __future__ import annotations

from typing import Any

TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def parse_bool(value: Any) -> bool:
    """
    Read a yes/no flag coming from env vars, CLI options or JSON.

    Real bools pass through; strings are true only when they are in TRUTHY
    (so "false", "0" and "" are false); anything else uses normal truthiness.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)
