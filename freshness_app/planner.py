"""
Chart refresh planning.

Turns a price-chart request plus the stored asset metadata into a fetch
plan: which window to request, at which interval, and whether the quote
provider should be called at all. The provider call itself is supplied by
the caller; fetch_with_fallback only sequences it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

import structlog

from .config.defaults import DefaultConfig, get_default_config
from .errors import MalformedDataError, MissingDataError, TemporalDataError
from .intervals.granularity import PROVIDER_INTERVALS
from .intervals.selector import fallback_interval, select_interval
from .policy.freshness import FreshnessPolicy
from .policy.models import FreshnessDecision, FreshnessQuery
from .utils.time import ensure_utc, minutes_between, parse_timestamp, resolve_now

logger = structlog.get_logger(__name__)

QuoteFetcher = Callable[[str, datetime, datetime, str], Optional[Sequence[Mapping[str, Any]]]]


@dataclass(frozen=True)
class AssetSnapshot:
    """Metadata of the most recently stored chart for a symbol."""
    symbol: str
    exchange_name: Optional[str] = None
    exchange_timezone_name: Optional[str] = None
    last_updated: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.last_updated is not None:
            object.__setattr__(self, "last_updated", ensure_utc(self.last_updated))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AssetSnapshot":
        """
        Build a snapshot from a stored asset row.

        Accepts both the camelCase keys of the stored rows and snake_case.

        Raises:
            MissingDataError: If the record has no symbol
            MalformedDataError: If lastUpdated is present but unparseable
        """
        symbol = record.get("symbol")
        if not symbol:
            raise MissingDataError("Asset record has no symbol", data_type="symbol")

        raw_last_updated = record.get("lastUpdated", record.get("last_updated"))

        return cls(
            symbol=symbol,
            exchange_name=record.get("exchangeName", record.get("exchange_name")),
            exchange_timezone_name=record.get(
                "exchangeTimezoneName", record.get("exchange_timezone_name")
            ),
            last_updated=parse_timestamp(raw_last_updated) if raw_last_updated not in (None, "") else None,
        )


@dataclass(frozen=True)
class FetchPlan:
    """What to request from the quote provider for one chart request."""
    symbol: str
    window_start: datetime
    window_end: datetime
    interval: str
    should_fetch: bool
    incremental: bool
    skip_reason: Optional[str] = None
    decision: Optional[FreshnessDecision] = None


@dataclass(frozen=True)
class FetchResult:
    """Quotes returned for a plan and the interval that produced them."""
    quotes: list = field(default_factory=list)
    interval: str = "1d"
    fell_back: bool = False
    fetched: bool = True


def _years_before(ts: datetime, years: int) -> datetime:
    try:
        return ts.replace(year=ts.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return ts.replace(year=ts.year - years, day=28)


class ChartRefreshPlanner:
    """
    Plans quote provider calls for price-chart requests.

    Incremental requests (no explicit window start, something already
    stored) continue from the stored last update and are gated by the
    freshness policy. Explicit windows are specialised requests and are
    only gated by their length.
    """

    def __init__(self, config: Optional[DefaultConfig] = None) -> None:
        self.config = config or get_default_config()
        self.policy = FreshnessPolicy(self.config.freshness)
        self.logger = logger

    def plan(
        self,
        symbol: str,
        snapshot: Optional[AssetSnapshot] = None,
        period1: Any = None,
        period2: Any = None,
        interval: Optional[str] = None,
        force_refresh: bool = False,
        now: Optional[datetime] = None
    ) -> FetchPlan:
        """
        Build the fetch plan for a chart request.

        Args:
            symbol: Ticker symbol requested
            snapshot: Stored metadata for the symbol, if any
            period1: Explicit window start (datetime, epoch or ISO-8601)
            period2: Explicit window end, defaults to now
            interval: Explicit provider interval, selected automatically if omitted
            force_refresh: Bypass the freshness policy
            now: Reference instant, captured from the wall clock if omitted

        Returns:
            The fetch plan

        Raises:
            MissingDataError: If no symbol was given
            MalformedDataError: If a period or the interval is invalid
            TemporalDataError: If an explicit window ends before it starts
        """
        if not symbol:
            raise MissingDataError("No query provided", data_type="symbol")

        now = resolve_now(now)
        window_end = parse_timestamp(period2) if period2 is not None else now

        incremental = period1 is None and snapshot is not None and snapshot.last_updated is not None
        if period1 is not None:
            window_start = parse_timestamp(period1)
        elif incremental:
            window_start = snapshot.last_updated
        else:
            window_start = _years_before(now, self.config.chart.default_lookback_years)

        if period1 is not None and period2 is not None and window_start > window_end:
            raise TemporalDataError(
                "Window start is after window end",
                timestamp=window_start.isoformat(),
                expected_timestamp=window_end.isoformat(),
                context={"symbol": symbol}
            )

        if interval is not None:
            if interval not in PROVIDER_INTERVALS:
                raise MalformedDataError(
                    f"Unsupported interval: {interval!r}",
                    raw_data=str(interval),
                    expected_format=", ".join(sorted(PROVIDER_INTERVALS))
                )
            chosen_interval = interval
        else:
            chosen_interval = select_interval(
                window_start, window_end, now, params=self.config.intervals
            ).value

        skip_reason = None
        decision = None

        if window_start >= window_end:
            skip_reason = "empty_window"
        elif minutes_between(window_start, window_end) < self.config.chart.min_fetch_window_minutes:
            skip_reason = "window_too_short"
        elif incremental:
            decision = self.policy.decide(
                FreshnessQuery(
                    exchange_code=snapshot.exchange_name,
                    timezone_hint=snapshot.exchange_timezone_name,
                    last_updated=snapshot.last_updated,
                    force_refresh=force_refresh,
                ),
                now=now,
            )
            if not decision.should_fetch:
                skip_reason = decision.reason.value

        plan = FetchPlan(
            symbol=symbol,
            window_start=window_start,
            window_end=window_end,
            interval=chosen_interval,
            should_fetch=skip_reason is None,
            incremental=incremental,
            skip_reason=skip_reason,
            decision=decision,
        )

        self.logger.info(
            "Planned chart refresh",
            symbol=symbol,
            window_start=window_start.isoformat(),
            window_end=window_end.isoformat(),
            interval=chosen_interval,
            should_fetch=plan.should_fetch,
            skip_reason=skip_reason,
            incremental=incremental
        )

        return plan


def filter_valid_quotes(quotes: Iterable[Mapping[str, Any]]) -> list:
    """Drop quotes whose close is missing or not a positive number."""
    valid = []
    dropped = 0

    for quote in quotes:
        close = quote.get("close")
        if isinstance(close, (int, float)) and not isinstance(close, bool) and close > 0:
            valid.append(quote)
        else:
            dropped += 1

    if dropped:
        logger.warning("Filtered out invalid quotes", dropped=dropped, kept=len(valid))

    return valid


def fetch_with_fallback(plan: FetchPlan, fetch_quotes: QuoteFetcher) -> FetchResult:
    """
    Execute a plan, retrying once at daily interval on an empty response.

    Args:
        plan: Plan from ChartRefreshPlanner
        fetch_quotes: Caller-owned provider call taking
            (symbol, window_start, window_end, interval)

    Returns:
        Valid quotes and the interval that produced them; fetched is False
        when the plan says not to fetch

    Raises:
        MissingDataError: If the provider returned nothing even at daily interval
    """
    if not plan.should_fetch:
        return FetchResult(quotes=[], interval=plan.interval, fell_back=False, fetched=False)

    quotes = list(fetch_quotes(plan.symbol, plan.window_start, plan.window_end, plan.interval) or [])
    interval = plan.interval
    fell_back = False

    daily = fallback_interval().value
    if not quotes and interval != daily:
        logger.warning(
            "Empty quotes for interval, falling back to daily",
            symbol=plan.symbol,
            interval=interval
        )
        quotes = list(fetch_quotes(plan.symbol, plan.window_start, plan.window_end, daily) or [])
        interval = daily
        fell_back = True

    if not quotes:
        raise MissingDataError(
            f"No chart data found for {plan.symbol}",
            data_type="quotes",
            context={"symbol": plan.symbol, "interval": interval, "fell_back": fell_back}
        )

    logger.info(
        "Fetched chart data",
        symbol=plan.symbol,
        interval=interval,
        quote_count=len(quotes),
        fell_back=fell_back
    )

    return FetchResult(quotes=filter_valid_quotes(quotes), interval=interval, fell_back=fell_back)
