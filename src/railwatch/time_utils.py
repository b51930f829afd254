from __future__ import annotations

"""Shared clock and timestamp parsing helpers."""

import math
import re
from datetime import datetime, timezone
from typing import Any

# Magnitude thresholds for detecting epoch units
MILLISECOND_TIMESTAMP_THRESHOLD = 1e12
MICROSECOND_TIMESTAMP_THRESHOLD = 1e15

_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def get_current_utc() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any, *, allow_none: bool = False) -> datetime | None:
    """
    Convert assorted timestamp inputs into an aware UTC datetime.

    Args:
        value: ISO-8601 string (with or without fractional seconds), epoch
            seconds/ms/us, or a datetime.
        allow_none: When True, return None on missing/invalid input instead of raising.
    """
    if value is None:
        if allow_none:
            return None
        raise ValueError("Timestamp value is required")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        if allow_none:
            return None
        raise TypeError("Boolean is not a timestamp")

    if isinstance(value, (int, float)):
        return _parse_numeric_timestamp(value, allow_none)

    if isinstance(value, str):
        return _parse_string_timestamp(value, allow_none)

    if allow_none:
        return None
    raise TypeError(f"Unsupported timestamp type: {type(value)}")


def format_timestamp(value: datetime) -> str:
    """Format an aware datetime as ISO-8601 with a Z suffix."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_numeric_timestamp(value: int | float, allow_none: bool) -> datetime | None:
    numeric = float(value)
    if not math.isfinite(numeric):
        if allow_none:
            return None
        raise ValueError(f"Non-finite timestamp value: {value!r}")
    if numeric > MICROSECOND_TIMESTAMP_THRESHOLD:
        numeric /= 1_000_000.0
    elif numeric > MILLISECOND_TIMESTAMP_THRESHOLD:
        numeric /= 1000.0
    try:
        return datetime.fromtimestamp(numeric, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        if allow_none:
            return None
        raise ValueError(f"Timestamp out of range: {value!r}") from exc


def _normalize_fraction(token: str) -> str:
    # fromisoformat on older interpreters only accepts 3 or 6 fractional digits
    return _FRACTION_PATTERN.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), token, count=1)


def _parse_string_timestamp(value: str, allow_none: bool) -> datetime | None:
    token = value.strip()
    if not token:
        if allow_none:
            return None
        raise ValueError("Timestamp string cannot be empty")

    try:
        numeric = float(token)
    except ValueError:  # Not a numeric string, try ISO format  # policy_guard: allow-silent-handler
        numeric = None
    if numeric is not None and math.isfinite(numeric):
        return _parse_numeric_timestamp(numeric, allow_none)

    try:
        normalized = _normalize_fraction(token.replace("Z", "+00:00"))
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        if allow_none:
            return None
        raise
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


__all__ = ["format_timestamp", "get_current_utc", "parse_timestamp"]
