# src/taskhub/core/clock.py

"""Timestamp helpers: aware UTC datetimes at millisecond precision, ISO-8601 on the wire."""

from __future__ import annotations

from datetime import UTC, datetime

DAY_SECONDS = 86400.0


def truncate_ms(dt: datetime) -> datetime:
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def utc_now() -> datetime:
    return truncate_ms(datetime.now(UTC))


def to_iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    """
    Accept a datetime, an ISO-8601 string (with or without 'Z') or None.

    Naive values are taken as UTC. The result is truncated to milliseconds.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = datetime.fromisoformat(raw)
    else:
        raise TypeError(f"Unsupported timestamp value: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return truncate_ms(dt.astimezone(UTC))
