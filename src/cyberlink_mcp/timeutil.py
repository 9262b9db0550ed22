"""Conversions between contract nanosecond timestamps and ISO-8601."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

NANOS_PER_MILLI = 1_000_000

Timestamp = Union[int, str]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_to_nanos(value: Timestamp) -> str:
    """Normalize a time input to a nanosecond timestamp string.

    Integers and digit strings are taken as nanoseconds already. Anything
    else must parse as ISO-8601; naive datetimes are treated as UTC.

    Raises:
        ValueError: If the value is neither.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid datetime: {value}")
    if isinstance(value, int):
        return str(value)
    text = str(value).strip()
    if text.isdigit():
        return text
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid datetime: {value}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return str(micros * 1_000)


def nanos_to_iso(nanos: Optional[Timestamp]) -> Optional[str]:
    """Render a nanosecond timestamp as an ISO-8601 UTC string.

    Returns None for empty or unparseable input.
    """
    if nanos is None or nanos == "":
        return None
    try:
        millis = int(nanos) // NANOS_PER_MILLI
    except (TypeError, ValueError):
        return None
    try:
        dt = _EPOCH + timedelta(milliseconds=millis)
    except (OverflowError, OSError, ValueError):
        return None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
