from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def now_utc() -> datetime:
    """Current instant (UTC, timezone-aware).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def _from_iso(value: str) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Empty timestamp")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_iso_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant carrying an offset or a trailing 'Z'.

    Naive values are rejected: an instant without an offset is ambiguous.
    """
    parsed = _from_iso(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no UTC offset: {value!r}")
    return parsed.astimezone(timezone.utc)


def parse_form_instant(value: str, *, tz_name: str) -> datetime:
    """Parse a form timestamp; values without an offset are wall-clock time in tz_name.

    Browser datetime-local inputs send "YYYY-MM-DDTHH:MM" with no offset.
    """
    parsed = _from_iso(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(tz_name))
    return parsed.astimezone(timezone.utc)


def to_iso_instant(value: datetime) -> str:
    """Format as UTC with millisecond precision and a 'Z' suffix (JS toISOString shape)."""
    if value.tzinfo is None:
        raise ValueError("Cannot serialize a naive datetime as an instant")
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
