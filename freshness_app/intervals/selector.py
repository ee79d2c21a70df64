"""
Interval selection for a requested historical window.

Picks the finest granularity whose look-back and span constraints both
hold. Spans are measured in whole hours and days, rounded half up, the
same way the chart loader has always measured them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from ..config.defaults import IntervalParams
from ..utils.time import ensure_utc, resolve_now, round_half_up
from .granularity import Granularity, build_rules

logger = structlog.get_logger(__name__)

_SECONDS_PER_HOUR = 3600
_SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class IntervalSelection:
    """A requested window, its derived distances and the chosen granularity."""
    window_start: datetime
    window_end: datetime
    now: datetime
    lookback_days: int
    span_hours: int
    span_days: int
    granularity: Granularity


def describe_interval(
    window_start: datetime,
    window_end: datetime,
    now: Optional[datetime] = None,
    force_daily: bool = False,
    params: Optional[IntervalParams] = None
) -> IntervalSelection:
    """
    Select a granularity and return it with the measurements behind it.

    Args:
        window_start: Start of the requested window
        window_end: End of the requested window
        now: Reference instant, captured from the wall clock if omitted
        force_daily: Skip the rules and return daily, used to retry after
            an empty fine-grained response
        params: Look-back limits, defaults if omitted

    Returns:
        The interval selection
    """
    now = resolve_now(now)
    window_start = ensure_utc(window_start)
    window_end = ensure_utc(window_end)

    span_seconds = (window_end - window_start).total_seconds()
    lookback_seconds = (now - window_start).total_seconds()

    span_hours = round_half_up(span_seconds / _SECONDS_PER_HOUR)
    span_days = round_half_up(span_seconds / _SECONDS_PER_DAY)
    lookback_days = round_half_up(lookback_seconds / _SECONDS_PER_DAY)

    granularity = Granularity.DAILY
    if not force_daily:
        for rule in build_rules(params):
            if rule.matches(lookback_days, span_hours, span_days):
                granularity = rule.granularity
                break

    logger.debug(
        "Selected interval",
        granularity=granularity.value,
        lookback_days=lookback_days,
        span_hours=span_hours,
        span_days=span_days,
        force_daily=force_daily
    )

    return IntervalSelection(
        window_start=window_start,
        window_end=window_end,
        now=now,
        lookback_days=lookback_days,
        span_hours=span_hours,
        span_days=span_days,
        granularity=granularity,
    )


def select_interval(
    window_start: datetime,
    window_end: datetime,
    now: Optional[datetime] = None,
    force_daily: bool = False,
    params: Optional[IntervalParams] = None
) -> Granularity:
    """Finest eligible granularity for the window; daily when nothing finer fits."""
    return describe_interval(window_start, window_end, now, force_daily, params).granularity


def fallback_interval() -> Granularity:
    """Granularity to retry with when a fine-grained request came back empty."""
    return Granularity.DAILY
