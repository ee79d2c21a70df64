"""
Static exchange calendar table.

Covers the largest stock exchanges by market capitalisation under the
codes quote providers report for them (several codes share a calendar).
Regular sessions only; exchange holidays are not modelled.
"""

from types import MappingProxyType
from typing import Mapping, Optional

import structlog

from .models import ExchangeCalendar, TradingSession

logger = structlog.get_logger(__name__)

WEEKDAYS = frozenset({0, 1, 2, 3, 4})  # Monday to Friday


def _calendar(code: str, name: str, timezone: str, *sessions: tuple[str, str]) -> ExchangeCalendar:
    return ExchangeCalendar(
        code=code,
        timezone=timezone,
        sessions=tuple(TradingSession.parse(start, end) for start, end in sessions),
        trading_days=WEEKDAYS,
        name=name,
    )


_CALENDARS = [
    # US markets
    _calendar("NYSE", "New York Stock Exchange", "America/New_York", ("09:30", "16:00")),
    _calendar("NASDAQ", "Nasdaq", "America/New_York", ("09:30", "16:00")),
    _calendar("NMS", "Nasdaq Global Select", "America/New_York", ("09:30", "16:00")),
    _calendar("NYQ", "New York Stock Exchange", "America/New_York", ("09:30", "16:00")),

    # London
    _calendar("LSE", "London Stock Exchange", "Europe/London", ("08:00", "16:30")),
    _calendar("LON", "London Stock Exchange", "Europe/London", ("08:00", "16:30")),

    # Tokyo, lunch break
    _calendar("TSE", "Tokyo Stock Exchange", "Asia/Tokyo", ("09:00", "11:30"), ("12:30", "15:25")),
    _calendar("JPX", "Japan Exchange Group", "Asia/Tokyo", ("09:00", "11:30"), ("12:30", "15:25")),

    # Mainland China, lunch break and closing auction from 14:57
    _calendar("SSE", "Shanghai Stock Exchange", "Asia/Shanghai", ("09:30", "11:30"), ("13:00", "14:57")),
    _calendar("SZSE", "Shenzhen Stock Exchange", "Asia/Shanghai", ("09:30", "11:30"), ("13:00", "14:57")),

    # Hong Kong, lunch break
    _calendar("HKEX", "Hong Kong Exchanges", "Asia/Hong_Kong", ("09:30", "12:00"), ("13:00", "16:00")),
    _calendar("HKG", "Hong Kong Exchanges", "Asia/Hong_Kong", ("09:30", "12:00"), ("13:00", "16:00")),

    # Euronext Paris
    _calendar("EPA", "Euronext Paris", "Europe/Paris", ("09:00", "17:30")),
    _calendar("PAR", "Euronext Paris", "Europe/Paris", ("09:00", "17:30")),

    # India
    _calendar("NSE", "National Stock Exchange of India", "Asia/Kolkata", ("09:15", "15:30")),
    _calendar("BSE", "Bombay Stock Exchange", "Asia/Kolkata", ("09:15", "15:30")),

    # Toronto
    _calendar("TSX", "Toronto Stock Exchange", "America/Toronto", ("09:30", "16:00")),
    _calendar("TOR", "Toronto Stock Exchange", "America/Toronto", ("09:30", "16:00")),

    # Australia
    _calendar("ASX", "Australian Securities Exchange", "Australia/Sydney", ("10:00", "16:00")),
    _calendar("AUS", "Australian Securities Exchange", "Australia/Sydney", ("10:00", "16:00")),

    # Frankfurt / Xetra
    _calendar("FRA", "Frankfurt Stock Exchange", "Europe/Berlin", ("08:00", "22:00")),
    _calendar("XETRA", "Xetra", "Europe/Berlin", ("08:00", "22:00")),

    # Other Euronext venues
    _calendar("BRU", "Euronext Brussels", "Europe/Brussels", ("09:00", "17:30")),
    _calendar("AMS", "Euronext Amsterdam", "Europe/Amsterdam", ("09:00", "17:30")),
    _calendar("MIL", "Euronext Milan", "Europe/Rome", ("09:00", "17:30")),
]

MARKET_HOURS: Mapping[str, ExchangeCalendar] = MappingProxyType(
    {calendar.code: calendar for calendar in _CALENDARS}
)

# Representative exchange for a timezone when the code itself is unknown
TIMEZONE_TO_EXCHANGE: Mapping[str, str] = MappingProxyType({
    "America/New_York": "NYSE",
    "Europe/London": "LSE",
    "Asia/Tokyo": "TSE",
    "Asia/Shanghai": "SSE",
    "Asia/Hong_Kong": "HKEX",
    "Europe/Paris": "EPA",
    "Asia/Kolkata": "NSE",
    "America/Toronto": "TSX",
    "Australia/Sydney": "ASX",
    "Europe/Berlin": "FRA",
})


def resolve_calendar(exchange_code: Optional[str], timezone_hint: Optional[str] = None) -> Optional[ExchangeCalendar]:
    """
    Find the calendar for an exchange code, falling back to its timezone.

    Args:
        exchange_code: Exchange code as reported by the quote provider
        timezone_hint: Optional IANA timezone of the exchange

    Returns:
        The matching calendar, or None if neither lookup succeeds
    """
    calendar = MARKET_HOURS.get((exchange_code or "").strip().upper())

    if calendar is None and timezone_hint:
        inferred = TIMEZONE_TO_EXCHANGE.get(timezone_hint)
        if inferred is not None:
            calendar = MARKET_HOURS[inferred]
            logger.debug(
                "Resolved calendar from timezone",
                exchange_code=exchange_code,
                timezone=timezone_hint,
                inferred_exchange=inferred
            )

    return calendar


def supported_exchanges() -> list[str]:
    """All exchange codes with a known calendar."""
    return list(MARKET_HOURS)
