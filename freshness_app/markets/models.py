"""
Exchange calendar data models.

Immutable descriptions of when a market trades: its IANA zone, its
intraday sessions and the weekdays it is open. Weekdays follow
date.weekday() (0 = Monday ... 6 = Sunday).
"""

from dataclasses import dataclass
from datetime import time
from zoneinfo import ZoneInfo

from ..errors import MalformedDataError
from ..utils.time import get_zone


def parse_clock(value: str) -> time:
    """Parse an "HH:MM" local time-of-day."""
    try:
        hour, minute = (int(part) for part in value.split(":"))
        return time(hour, minute)
    except (ValueError, TypeError, AttributeError) as e:
        raise MalformedDataError(
            f"Invalid session time: {value!r}",
            raw_data=str(value),
            expected_format="HH:MM"
        ) from e


@dataclass(frozen=True)
class TradingSession:
    """Contiguous open-to-close interval within a trading day."""
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise MalformedDataError(
                "Session must start before it ends",
                context={"start": self.start.isoformat(), "end": self.end.isoformat()}
            )

    @classmethod
    def parse(cls, start: str, end: str) -> "TradingSession":
        """Build a session from "HH:MM" strings."""
        return cls(start=parse_clock(start), end=parse_clock(end))

    def contains(self, clock: time) -> bool:
        """True if the local time-of-day falls inside the session, bounds included."""
        return self.start <= clock <= self.end


@dataclass(frozen=True)
class ExchangeCalendar:
    """Timezone, sessions and trading days of a single exchange."""

    code: str
    timezone: str
    sessions: tuple[TradingSession, ...]
    trading_days: frozenset[int]
    name: str = ""

    def __post_init__(self) -> None:
        if not self.sessions:
            raise MalformedDataError(
                "Exchange calendar needs at least one session",
                context={"code": self.code}
            )

        for earlier, later in zip(self.sessions, self.sessions[1:]):
            if earlier.end >= later.start:
                raise MalformedDataError(
                    "Sessions must be chronological and non-overlapping",
                    context={"code": self.code}
                )

        if not self.trading_days or not self.trading_days <= frozenset(range(7)):
            raise MalformedDataError(
                "Trading days must be a non-empty subset of 0-6",
                context={"code": self.code, "trading_days": sorted(self.trading_days)}
            )

        # Fail at construction rather than at first lookup
        get_zone(self.timezone)

    @property
    def zone(self) -> ZoneInfo:
        return get_zone(self.timezone)

    @property
    def first_open(self) -> time:
        """Start of the first session of the day."""
        return self.sessions[0].start

    @property
    def last_close(self) -> time:
        """End of the last session of the day."""
        return self.sessions[-1].end
