"""
Fetch-eligibility policy.

Bounds calls to the quote provider: while a session is open, data older
than the intraday ceiling is refreshed; once the market has closed, at
most one catch-up fetch picks up the closing price; on non-trading days
nothing is fetched. Unknown markets are always eligible so that an
unrecognised exchange never blocks data loading.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

from ..config.defaults import FreshnessParams
from ..logging.config import get_policy_logger, log_fetch_decision
from ..markets.exchanges import resolve_calendar
from ..markets.hours import is_market_open, is_trading_day, last_market_close, next_market_open
from ..utils.time import ensure_utc, minutes_between, resolve_now
from .models import FreshnessDecision, FreshnessQuery, FreshnessReason

policy_logger = get_policy_logger(__name__)


def _skip(reason: FreshnessReason, next_fetch_time: Optional[datetime]) -> FreshnessDecision:
    return FreshnessDecision(
        should_fetch=False,
        reason=reason,
        next_fetch_time=ensure_utc(next_fetch_time) if next_fetch_time else None,
    )


def _fetch(reason: FreshnessReason) -> FreshnessDecision:
    return FreshnessDecision(should_fetch=True, reason=reason)


class FreshnessPolicy:
    """Decides whether stored market data should be refreshed now."""

    def __init__(self, params: Optional[FreshnessParams] = None) -> None:
        self.params = params or FreshnessParams()
        self.logger = policy_logger

    def decide(self, query: FreshnessQuery, now: Optional[datetime] = None) -> FreshnessDecision:
        """
        Evaluate the policy for one query.

        Args:
            query: Validated freshness query
            now: Reference instant, captured from the wall clock if omitted

        Returns:
            The fetch decision
        """
        now = resolve_now(now)
        decision = self._evaluate(query, now)

        log_fetch_decision(
            self.logger,
            query.exchange_code or "",
            decision,
            context={"now": now.isoformat(), "force_refresh": query.force_refresh}
        )

        return decision

    def _evaluate(self, query: FreshnessQuery, now: datetime) -> FreshnessDecision:
        if query.force_refresh:
            return _fetch(FreshnessReason.FORCED)

        calendar = resolve_calendar(query.exchange_code, query.timezone_hint)
        if calendar is None:
            return _fetch(FreshnessReason.UNKNOWN_MARKET)

        horizon = self.params.search_horizon_days

        if not is_trading_day(calendar, now):
            return _skip(FreshnessReason.NON_TRADING_DAY, next_market_open(calendar, now, horizon))

        if query.last_updated is None:
            return _fetch(FreshnessReason.NO_PREVIOUS_DATA)

        elapsed = minutes_between(query.last_updated, now)

        if is_market_open(calendar, now):
            if elapsed >= self.params.intraday_stale_minutes:
                return _fetch(FreshnessReason.STALE_DURING_SESSION)

            return _skip(
                FreshnessReason.FRESH_DURING_SESSION,
                query.last_updated + timedelta(minutes=self.params.intraday_stale_minutes)
            )

        # Closed, but today is a trading day
        last_close = last_market_close(calendar, now, horizon)
        if last_close is not None and query.last_updated > last_close:
            return _skip(FreshnessReason.HAVE_POST_CLOSE_DATA, next_market_open(calendar, now, horizon))

        if elapsed >= self.params.post_close_refetch_minutes:
            return _fetch(FreshnessReason.POST_CLOSE_CATCH_UP)

        return _skip(FreshnessReason.RECENT_POST_CLOSE_FETCH, next_market_open(calendar, now, horizon))


def should_fetch_data(
    exchange_code: Optional[str],
    timezone_hint: Optional[str] = None,
    last_updated: Any = None,
    force_refresh: bool = False,
    now: Optional[datetime] = None,
    params: Optional[FreshnessParams] = None
) -> FreshnessDecision:
    """
    Decide whether data for an exchange should be refreshed now.

    Args:
        exchange_code: Exchange code from stored asset metadata
        timezone_hint: Exchange timezone, used when the code is unknown
        last_updated: Last fetch instant in any representation FreshnessQuery.from_raw accepts
        force_refresh: Bypass the policy entirely
        now: Reference instant, captured from the wall clock if omitted
        params: Policy thresholds, defaults if omitted

    Returns:
        The fetch decision

    Raises:
        MalformedDataError: If last_updated cannot be parsed
    """
    query = FreshnessQuery.from_raw(
        exchange_code,
        timezone_hint=timezone_hint,
        last_updated=last_updated,
        force_refresh=force_refresh,
    )
    return FreshnessPolicy(params).decide(query, now=now)
