"""
Granularity tags and the provider constraints attached to them.

The quote provider only serves fine bars for recent data:
1m for the last 7 days, 5m/15m/30m for the last 60 days, 60m for the last
730 days, daily without limit. Each rule also bounds the window length so
that a request returns a sensible number of bars.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config.defaults import IntervalParams
from ..errors import MalformedDataError

# Every interval string the quote provider accepts
PROVIDER_INTERVALS = frozenset({
    "1m", "2m", "5m", "15m", "30m", "60m", "90m", "1h", "1d", "5d", "1wk", "1mo", "3mo",
})


class Granularity(str, Enum):
    """Selectable sampling resolutions, finest first."""
    ONE_MINUTE = "1m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    SIXTY_MINUTES = "60m"
    DAILY = "1d"

    @property
    def minutes(self) -> int:
        return _BAR_MINUTES[self]

    @property
    def is_intraday(self) -> bool:
        return self is not Granularity.DAILY

    @classmethod
    def parse(cls, value: str) -> "Granularity":
        """Look up a tag by its provider string."""
        try:
            return cls(value)
        except ValueError as e:
            raise MalformedDataError(
                f"Unknown granularity: {value!r}",
                raw_data=str(value),
                expected_format=", ".join(g.value for g in cls)
            ) from e


_BAR_MINUTES = {
    Granularity.ONE_MINUTE: 1,
    Granularity.FIVE_MINUTES: 5,
    Granularity.FIFTEEN_MINUTES: 15,
    Granularity.THIRTY_MINUTES: 30,
    Granularity.SIXTY_MINUTES: 60,
    Granularity.DAILY: 1440,
}


@dataclass(frozen=True)
class GranularityRule:
    """
    Eligibility of one granularity.

    The window span is measured in span_unit ("hours" or "days"); it must be
    greater than min_span (when set) and at most max_span. The window start
    may lie at most max_lookback_days before now.
    """
    granularity: Granularity
    max_lookback_days: int
    span_unit: str
    max_span: int
    min_span: Optional[int] = None

    def matches(self, lookback_days: int, span_hours: int, span_days: int) -> bool:
        span = span_hours if self.span_unit == "hours" else span_days

        if lookback_days > self.max_lookback_days:
            return False
        if self.min_span is not None and span <= self.min_span:
            return False
        return span <= self.max_span


def build_rules(params: Optional[IntervalParams] = None) -> tuple[GranularityRule, ...]:
    """Rules in evaluation order; daily is the implicit fallback."""
    params = params or IntervalParams()

    return (
        GranularityRule(Granularity.ONE_MINUTE, params.one_minute_lookback_days, "hours", max_span=1),
        GranularityRule(Granularity.FIVE_MINUTES, params.intraday_lookback_days, "days", max_span=1),
        GranularityRule(Granularity.FIFTEEN_MINUTES, params.intraday_lookback_days, "days", max_span=3, min_span=1),
        GranularityRule(Granularity.THIRTY_MINUTES, params.intraday_lookback_days, "days", max_span=7, min_span=3),
        GranularityRule(Granularity.SIXTY_MINUTES, params.hourly_lookback_days, "days", max_span=60, min_span=7),
    )
