"""
Freshness policy data models.

A FreshnessQuery is validated on construction so that a bad timestamp is
rejected instead of being mistaken for "no previous data".
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..errors import MalformedDataError
from ..utils.time import ensure_utc, format_market_time, parse_timestamp


class FreshnessReason(str, Enum):
    """Why a fetch was allowed or skipped."""
    FORCED = "forced"
    UNKNOWN_MARKET = "unknown_market"
    NON_TRADING_DAY = "non_trading_day"
    NO_PREVIOUS_DATA = "no_previous_data"
    STALE_DURING_SESSION = "stale_during_session"
    FRESH_DURING_SESSION = "fresh_during_session"
    HAVE_POST_CLOSE_DATA = "have_post_close_data"
    POST_CLOSE_CATCH_UP = "post_close_catch_up"
    RECENT_POST_CLOSE_FETCH = "recent_post_close_fetch"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES = {
    FreshnessReason.FORCED: "Force refresh requested",
    FreshnessReason.UNKNOWN_MARKET: "Unknown market, allowing fetch",
    FreshnessReason.NON_TRADING_DAY: "Market closed - not a trading day",
    FreshnessReason.NO_PREVIOUS_DATA: "No previous data",
    FreshnessReason.STALE_DURING_SESSION: "Market open - data stale",
    FreshnessReason.FRESH_DURING_SESSION: "Market open - data fresh",
    FreshnessReason.HAVE_POST_CLOSE_DATA: "Market closed - have post-close data",
    FreshnessReason.POST_CLOSE_CATCH_UP: "Market closed - fetching post-close data",
    FreshnessReason.RECENT_POST_CLOSE_FETCH: "Market closed - recent post-close fetch",
}


@dataclass(frozen=True)
class FreshnessQuery:
    """Inputs of a single fetch-eligibility decision."""

    exchange_code: Optional[str]
    timezone_hint: Optional[str] = None
    last_updated: Optional[datetime] = None
    force_refresh: bool = False

    def __post_init__(self) -> None:
        if self.exchange_code is not None and not isinstance(self.exchange_code, str):
            raise MalformedDataError(
                "Exchange code must be a string",
                raw_data=repr(self.exchange_code),
                expected_format="exchange code"
            )

        if self.timezone_hint is not None and not isinstance(self.timezone_hint, str):
            raise MalformedDataError(
                "Timezone hint must be a string",
                raw_data=repr(self.timezone_hint),
                expected_format="IANA timezone name"
            )

        if self.last_updated is not None:
            if not isinstance(self.last_updated, datetime):
                raise MalformedDataError(
                    "last_updated must be a datetime",
                    raw_data=repr(self.last_updated),
                    expected_format="datetime"
                )
            object.__setattr__(self, "last_updated", ensure_utc(self.last_updated))

    @classmethod
    def from_raw(
        cls,
        exchange_code: Optional[str],
        timezone_hint: Optional[str] = None,
        last_updated: Any = None,
        force_refresh: bool = False
    ) -> "FreshnessQuery":
        """
        Build a query from stored asset metadata.

        last_updated may be a datetime, epoch seconds or milliseconds (number
        or digit string) or an ISO-8601 string. None means nothing is stored.

        Raises:
            MalformedDataError: If last_updated is present but unparseable
        """
        parsed = None if last_updated is None else parse_timestamp(last_updated)

        return cls(
            exchange_code=exchange_code,
            timezone_hint=timezone_hint,
            last_updated=parsed,
            force_refresh=bool(force_refresh),
        )


@dataclass(frozen=True)
class FreshnessDecision:
    """Result of a fetch-eligibility decision."""

    should_fetch: bool
    reason: FreshnessReason
    next_fetch_time: Optional[datetime] = None

    @property
    def message(self) -> str:
        """Human-readable reason."""
        return self.reason.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "should_fetch": self.should_fetch,
            "reason": self.reason.value,
            "message": self.message,
            "next_fetch_time": format_market_time(self.next_fetch_time) if self.next_fetch_time else None,
        }
