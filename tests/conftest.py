"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from freshness_app.markets.exchanges import MARKET_HOURS


@pytest.fixture
def nasdaq():
    """Nasdaq calendar, 09:30-16:00 New York."""
    return MARKET_HOURS["NASDAQ"]


@pytest.fixture
def tse():
    """Tokyo calendar with a lunch break."""
    return MARKET_HOURS["TSE"]


@pytest.fixture
def stored_asset_record():
    """Stored asset row as the chart loader keeps it."""
    return {
        "symbol": "AAPL",
        "exchangeName": "NMS",
        "exchangeTimezoneName": "America/New_York",
        # 2024-01-17 09:50 New York
        "lastUpdated": str(int(datetime(2024, 1, 17, 14, 50, tzinfo=timezone.utc).timestamp() * 1000)),
    }
