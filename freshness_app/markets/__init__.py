"""
Exchange calendars and trading-hours checks.

The calendar table is static reference data; the functions in hours.py
answer trading-day and session questions for a given instant.
"""
from .exchanges import MARKET_HOURS, TIMEZONE_TO_EXCHANGE, resolve_calendar, supported_exchanges
from .hours import (
    MarketStatus,
    get_market_status,
    is_market_open,
    is_trading_day,
    last_market_close,
    market_status,
    next_market_open,
)
from .models import ExchangeCalendar, TradingSession

__all__ = [
    "MARKET_HOURS",
    "TIMEZONE_TO_EXCHANGE",
    "ExchangeCalendar",
    "MarketStatus",
    "TradingSession",
    "get_market_status",
    "is_market_open",
    "is_trading_day",
    "last_market_close",
    "market_status",
    "next_market_open",
    "resolve_calendar",
    "supported_exchanges",
]
