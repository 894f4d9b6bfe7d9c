"""Shared UTC time helpers.

Every module that needs the current timestamp or reads one back from
storage goes through these two functions so naive datetimes never leak
into rule ordering or log entries.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC timestamp."""
    return datetime.now(UTC)


def parse_timestamp(raw: str | None) -> datetime:
    """Parse an ISO timestamp, assuming UTC when no offset is present.

    Falls back to ``utc_now()`` for empty values so that records written
    by older versions without timestamps still load.
    """
    if not raw:
        return utc_now()
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value
