#!/usr/bin/env python3
"""
Basic Usage Example - Market Data Freshness Policy

This script walks a stored Nasdaq asset through a trading week and shows:
- Market status and the next open / last close
- Fetch decisions at different times of day
- Interval selection for historical windows
- Chart refresh planning with a daily fallback

Run: python examples/basic_usage.py
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List
from zoneinfo import ZoneInfo

from freshness_app.intervals import describe_interval
from freshness_app.logging import configure_logging
from freshness_app.markets import MARKET_HOURS, last_market_close, market_status, next_market_open
from freshness_app.planner import AssetSnapshot, ChartRefreshPlanner, fetch_with_fallback
from freshness_app.policy import should_fetch_data

NEW_YORK = ZoneInfo("America/New_York")


def at(day: int, hour: int, minute: int = 0) -> datetime:
    """New York wall time in January 2024."""
    return datetime(2024, 1, day, hour, minute, tzinfo=NEW_YORK)


def fake_provider(symbol: str, start: datetime, end: datetime, interval: str) -> List[Dict[str, Any]]:
    """Quote provider stand-in with no intraday history older than a day."""
    if interval != "1d" and (end - start) > timedelta(days=1):
        return []

    days = max(1, (end - start).days)
    return [{"date": (start + timedelta(days=i)).isoformat(), "close": 180.0 + i} for i in range(days)]


def demonstrate_market_hours() -> None:
    print("\n🕐 Market hours")
    nasdaq = MARKET_HOURS["NASDAQ"]

    for instant in (at(17, 10), at(17, 18), at(20, 12)):
        print(f"  {instant:%a %H:%M}: {market_status(nasdaq, instant).label}")
        print(f"    next open:  {next_market_open(nasdaq, instant)}")
        print(f"    last close: {last_market_close(nasdaq, instant)}")


def demonstrate_fetch_decisions() -> None:
    print("\n📡 Fetch decisions (last update Wed 09:50)")
    last_updated = at(17, 9, 50)

    for now in (at(17, 10), at(17, 10, 10), at(17, 18), at(20, 12)):
        decision = should_fetch_data("NMS", "America/New_York", last_updated, now=now)
        print(f"  {now:%a %H:%M}: {decision.to_dict()}")

    decision = should_fetch_data("XNAS-OTC", None, last_updated, now=at(17, 10))
    print(f"  Unknown exchange: {decision.message}")


def demonstrate_interval_selection() -> None:
    print("\n📏 Interval selection")
    now = at(17, 12)

    for days_ago, span in ((3, timedelta(hours=2)), (10, timedelta(days=2)), (100, timedelta(hours=2)), (365, timedelta(days=30))):
        start = now - timedelta(days=days_ago)
        selection = describe_interval(start, start + span, now=now)
        print(f"  start {days_ago:>3}d ago, span {span}: {selection.granularity.value}")


def demonstrate_chart_planning() -> None:
    print("\n📈 Chart refresh planning")
    planner = ChartRefreshPlanner()
    snapshot = AssetSnapshot.from_record({
        "symbol": "AAPL",
        "exchangeName": "NMS",
        "exchangeTimezoneName": "America/New_York",
        "lastUpdated": str(int(at(12, 15).timestamp() * 1000)),
    })

    plan = planner.plan("AAPL", snapshot, now=at(17, 10))
    print(f"  incremental plan: interval={plan.interval} fetch={plan.should_fetch} reason={plan.skip_reason}")

    result = fetch_with_fallback(plan, fake_provider)
    print(f"  fetched {len(result.quotes)} quotes at {result.interval} (fell back: {result.fell_back})")


def main() -> None:
    configure_logging(level="WARNING")

    print("🚀 Market Data Freshness Policy - Basic Usage")
    demonstrate_market_hours()
    demonstrate_fetch_decisions()
    demonstrate_interval_selection()
    demonstrate_chart_planning()
    print("\n✅ Done")


if __name__ == "__main__":
    main()
