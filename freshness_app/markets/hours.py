"""
Trading-day, session and next-open / last-close checks.

All functions take the instant to evaluate explicitly so a decision can
capture "now" once and reuse it. is_market_open looks at time-of-day only;
it does not check whether the weekday trades. Callers that need both
(market_status, the freshness policy) combine the two checks themselves.
"""

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from ..utils.time import ensure_utc, resolve_now, to_local
from .exchanges import resolve_calendar
from .models import ExchangeCalendar

SEARCH_HORIZON_DAYS = 7


class MarketStatus(str, Enum):
    """Human-facing market state."""
    OPEN = "open"
    CLOSED = "closed"
    NON_TRADING_DAY = "non_trading_day"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    MarketStatus.OPEN: "Market Open",
    MarketStatus.CLOSED: "Market Closed",
    MarketStatus.NON_TRADING_DAY: "Market Closed - Non-trading day",
    MarketStatus.UNKNOWN: "Market hours unknown",
}


def is_trading_day(calendar: ExchangeCalendar, instant: datetime) -> bool:
    """True if the exchange trades on the local weekday of the instant."""
    return to_local(instant, calendar.timezone).weekday() in calendar.trading_days


def is_market_open(calendar: ExchangeCalendar, instant: datetime) -> bool:
    """
    True if the local time-of-day falls inside any session.

    Compared at minute resolution with inclusive bounds, so 16:00:59 still
    counts as open for a 16:00 close. The weekday is not checked.
    """
    clock = to_local(instant, calendar.timezone).time().replace(second=0, microsecond=0)
    return any(session.contains(clock) for session in calendar.sessions)


def _at_local(calendar: ExchangeCalendar, day: date, clock: time) -> datetime:
    return datetime.combine(day, clock, tzinfo=calendar.zone)


def next_market_open(
    calendar: ExchangeCalendar,
    now: datetime,
    horizon_days: int = SEARCH_HORIZON_DAYS
) -> Optional[datetime]:
    """
    Find the next first-session open at or after today.

    Today's open is returned only while it is still ahead of now.

    Args:
        calendar: Exchange calendar
        now: Reference instant
        horizon_days: Number of local days to scan, today included

    Returns:
        Exchange-local aware datetime, or None if nothing opens within the horizon
    """
    now = ensure_utc(now)
    today = to_local(now, calendar.timezone).date()

    for offset in range(horizon_days):
        day = today + timedelta(days=offset)
        if day.weekday() not in calendar.trading_days:
            continue

        open_at = _at_local(calendar, day, calendar.first_open)
        if offset > 0 or open_at > now:
            return open_at

    return None


def last_market_close(
    calendar: ExchangeCalendar,
    now: datetime,
    horizon_days: int = SEARCH_HORIZON_DAYS
) -> Optional[datetime]:
    """
    Find the most recent last-session close at or before today.

    Today's close is returned only once it has passed.

    Args:
        calendar: Exchange calendar
        now: Reference instant
        horizon_days: Number of local days to scan backwards, today included

    Returns:
        Exchange-local aware datetime, or None if nothing closed within the horizon
    """
    now = ensure_utc(now)
    today = to_local(now, calendar.timezone).date()

    for offset in range(horizon_days):
        day = today - timedelta(days=offset)
        if day.weekday() not in calendar.trading_days:
            continue

        close_at = _at_local(calendar, day, calendar.last_close)
        if offset > 0 or close_at < now:
            return close_at

    return None


def market_status(calendar: ExchangeCalendar, instant: datetime) -> MarketStatus:
    """Combine the trading-day and session checks into one status."""
    if not is_trading_day(calendar, instant):
        return MarketStatus.NON_TRADING_DAY

    return MarketStatus.OPEN if is_market_open(calendar, instant) else MarketStatus.CLOSED


def get_market_status(
    exchange_code: str,
    timezone_hint: Optional[str] = None,
    now: Optional[datetime] = None
) -> MarketStatus:
    """Market status by exchange code; UNKNOWN when no calendar resolves."""
    calendar = resolve_calendar(exchange_code, timezone_hint)
    if calendar is None:
        return MarketStatus.UNKNOWN

    return market_status(calendar, resolve_now(now))
