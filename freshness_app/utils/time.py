"""
Time utilities for instant normalization and exchange-local conversion.

Stored assets keep their last update as epoch milliseconds, sometimes as a
string, while quote events arrive in epoch seconds. Everything is normalized
to timezone-aware UTC datetimes at the library boundary.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import MalformedDataError

# Epoch values below this are seconds, at or above it milliseconds
EPOCH_MS_THRESHOLD = 10_000_000_000


def utc_now() -> datetime:
    """
    Get the current wall-clock time as an aware UTC datetime.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """
    Capture "now" for a single decision.

    Args:
        now: Optional caller-supplied instant (tests, replays)

    Returns:
        Aware UTC datetime, falling back to wall-clock time
    """
    if now is not None:
        return ensure_utc(now)

    return utc_now()


def ensure_utc(ts: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Args:
        ts: Aware or naive datetime; naive values are taken as UTC

    Returns:
        Equivalent aware UTC datetime
    """
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts.replace(tzinfo=timezone.utc)

    return ts.astimezone(timezone.utc)


def get_zone(tz_name: str) -> ZoneInfo:
    """Look up an IANA zone, raising MalformedDataError for unknown names."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise MalformedDataError(
            f"Unknown timezone: {tz_name}",
            raw_data=str(tz_name),
            expected_format="IANA timezone name"
        ) from e


def to_local(ts: datetime, tz_name: str) -> datetime:
    """
    Convert an instant to wall time in the given zone.

    Args:
        ts: Instant to convert
        tz_name: IANA timezone name

    Returns:
        Aware datetime in the target zone
    """
    return ensure_utc(ts).astimezone(get_zone(tz_name))


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end (negative if end precedes start)."""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60.0


def epoch_to_datetime(value: float) -> datetime:
    """
    Convert an epoch timestamp in seconds or milliseconds to UTC.

    Values below 1e10 are treated as seconds, anything larger as
    milliseconds.

    Args:
        value: Epoch timestamp

    Returns:
        Aware UTC datetime

    Raises:
        MalformedDataError: If the value is not finite or out of range
    """
    if not math.isfinite(value):
        raise MalformedDataError(
            "Epoch timestamp must be finite",
            raw_data=str(value),
            expected_format="epoch seconds or milliseconds"
        )

    seconds = value if abs(value) < EPOCH_MS_THRESHOLD else value / 1000.0

    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedDataError(
            "Epoch timestamp out of range",
            raw_data=str(value),
            expected_format="epoch seconds or milliseconds"
        ) from e


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, epoch seconds/milliseconds as numbers or digit
    strings, and ISO-8601 strings (a trailing "Z" is allowed).

    Args:
        raw: Timestamp in any supported representation

    Returns:
        Aware UTC datetime

    Raises:
        MalformedDataError: If the value cannot be interpreted
    """
    if isinstance(raw, datetime):
        return ensure_utc(raw)

    # bool is an int subclass but never a timestamp
    if isinstance(raw, bool):
        raise MalformedDataError(
            "Boolean is not a timestamp",
            raw_data=str(raw),
            expected_format="datetime, epoch or ISO-8601"
        )

    if isinstance(raw, (int, float)):
        return epoch_to_datetime(float(raw))

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise MalformedDataError(
                "Empty timestamp string",
                raw_data=raw,
                expected_format="epoch or ISO-8601"
            )

        if text.lstrip("-").isdigit():
            return epoch_to_datetime(float(text))

        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"

        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise MalformedDataError(
                f"Unparseable timestamp: {raw!r}",
                raw_data=raw,
                expected_format="epoch or ISO-8601"
            ) from e

    raise MalformedDataError(
        f"Unsupported timestamp type: {type(raw).__name__}",
        raw_data=repr(raw),
        expected_format="datetime, epoch or ISO-8601"
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded towards +inf."""
    return math.floor(value + 0.5)


def format_market_time(ts: datetime) -> str:
    """
    Format an instant for decisions and logging.

    Args:
        ts: Instant to format

    Returns:
        ISO8601 formatted string
    """
    return ts.isoformat()
