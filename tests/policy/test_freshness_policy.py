"""Tests for the fetch-eligibility policy."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

from freshness_app.config.defaults import FreshnessParams
from freshness_app.errors import MalformedDataError
from freshness_app.policy import FreshnessPolicy, FreshnessQuery, FreshnessReason, should_fetch_data


NEW_YORK = ZoneInfo("America/New_York")


def ny(day: int, hour: int, minute: int = 0) -> datetime:
    """New York wall time in January 2024; the 17th is a Wednesday."""
    return datetime(2024, 1, day, hour, minute, tzinfo=NEW_YORK)


TOKYO = ZoneInfo("Asia/Tokyo")


def tokyo(day: int, hour: int, minute: int = 0) -> datetime:
    """Tokyo wall time in January 2024."""
    return datetime(2024, 1, day, hour, minute, tzinfo=TOKYO)


def _utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


class TestBypasses:
    """Test inputs that never consult the calendar."""

    def test_force_refresh_always_fetches(self):
        for now in (ny(17, 10), ny(20, 12), ny(17, 20)):
            decision = should_fetch_data("NASDAQ", last_updated=now, force_refresh=True, now=now)
            assert decision.should_fetch is True
            assert decision.reason is FreshnessReason.FORCED
            assert decision.next_fetch_time is None

    def test_force_refresh_with_unknown_exchange(self):
        decision = should_fetch_data("ZZZ", force_refresh=True, now=ny(17, 10))
        assert decision.reason is FreshnessReason.FORCED

    def test_unknown_exchange_is_permissive(self):
        decision = should_fetch_data("ZZZ", last_updated=ny(17, 9, 59), now=ny(17, 10))
        assert decision.should_fetch is True
        assert decision.reason is FreshnessReason.UNKNOWN_MARKET
        assert decision.message == "Unknown market, allowing fetch"

    def test_missing_exchange_code_is_permissive(self):
        decision = should_fetch_data(None, now=ny(20, 10))
        assert decision.reason is FreshnessReason.UNKNOWN_MARKET

    def test_timezone_hint_resolves_unknown_code(self):
        """An unlisted NYC venue still follows the New York calendar."""
        decision = should_fetch_data("NCM", "America/New_York", now=ny(20, 10))
        assert decision.should_fetch is False
        assert decision.reason is FreshnessReason.NON_TRADING_DAY


class TestNonTradingDay:
    """Test weekend handling."""

    def test_weekend_skips_until_monday_open(self):
        decision = should_fetch_data("NASDAQ", last_updated=None, now=ny(20, 12))
        assert decision.should_fetch is False
        assert decision.reason is FreshnessReason.NON_TRADING_DAY
        assert decision.next_fetch_time == _utc(ny(22, 9, 30))

    def test_weekend_checked_before_missing_data(self):
        """Even with nothing stored, a weekend never fetches."""
        decision = should_fetch_data("NYSE", now=ny(21, 23))
        assert decision.reason is FreshnessReason.NON_TRADING_DAY

    def test_next_fetch_time_is_utc(self):
        decision = should_fetch_data("NASDAQ", now=ny(20, 12))
        assert decision.next_fetch_time.tzinfo is timezone.utc
        assert decision.next_fetch_time == datetime(2024, 1, 22, 14, 30, tzinfo=timezone.utc)


class TestDuringSession:
    """Test the intraday staleness ceiling."""

    def test_no_previous_data_fetches(self):
        decision = should_fetch_data("NASDAQ", now=ny(17, 10))
        assert decision.should_fetch is True
        assert decision.reason is FreshnessReason.NO_PREVIOUS_DATA

    @pytest.mark.parametrize("minutes_ago,expected", [(14, False), (15, True), (16, True)])
    def test_staleness_boundary(self, minutes_ago, expected):
        now = ny(17, 11)
        decision = should_fetch_data("NASDAQ", last_updated=now - timedelta(minutes=minutes_ago), now=now)
        assert decision.should_fetch is expected

    def test_fresh_data_waits_for_ceiling(self):
        """Wednesday 10:00 with a 09:50 update waits until 10:05."""
        decision = should_fetch_data("NASDAQ", last_updated=ny(17, 9, 50), now=ny(17, 10))
        assert decision.should_fetch is False
        assert decision.reason is FreshnessReason.FRESH_DURING_SESSION
        assert decision.next_fetch_time == _utc(ny(17, 10, 5))
        assert decision.message == "Market open - data fresh"

    def test_stale_data_fetches(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(16, 15), now=ny(17, 10))
        assert decision.should_fetch is True
        assert decision.reason is FreshnessReason.STALE_DURING_SESSION

    def test_raw_epoch_milliseconds(self, stored_asset_record):
        decision = should_fetch_data(
            stored_asset_record["exchangeName"],
            stored_asset_record["exchangeTimezoneName"],
            last_updated=stored_asset_record["lastUpdated"],
            now=ny(17, 10),
        )
        assert decision.reason is FreshnessReason.FRESH_DURING_SESSION
        assert decision.next_fetch_time == _utc(ny(17, 10, 5))

    def test_raw_epoch_seconds(self):
        decision = should_fetch_data("NASDAQ", last_updated=int(ny(17, 9, 50).timestamp()), now=ny(17, 10))
        assert decision.reason is FreshnessReason.FRESH_DURING_SESSION

    def test_iso_string(self):
        decision = should_fetch_data("NASDAQ", last_updated="2024-01-17T14:50:00Z", now=ny(17, 10))
        assert decision.reason is FreshnessReason.FRESH_DURING_SESSION


class TestAfterClose:
    """Test the single post-close catch-up fetch."""

    def test_have_post_close_data(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(17, 16, 30), now=ny(17, 18))
        assert decision.should_fetch is False
        assert decision.reason is FreshnessReason.HAVE_POST_CLOSE_DATA
        assert decision.next_fetch_time == _utc(ny(18, 9, 30))

    def test_post_close_data_regardless_of_elapsed(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(17, 16, 1), now=ny(17, 23, 59))
        assert decision.reason is FreshnessReason.HAVE_POST_CLOSE_DATA

    def test_catch_up_after_threshold(self):
        """61 minutes since a pre-close update triggers the catch-up."""
        decision = should_fetch_data("NASDAQ", last_updated=ny(17, 15, 59), now=ny(17, 17, 0))
        assert decision.should_fetch is True
        assert decision.reason is FreshnessReason.POST_CLOSE_CATCH_UP

    def test_recent_fetch_waits(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(17, 15, 59), now=ny(17, 16, 30))
        assert decision.should_fetch is False
        assert decision.reason is FreshnessReason.RECENT_POST_CLOSE_FETCH
        assert decision.next_fetch_time == _utc(ny(18, 9, 30))

    def test_before_open_with_yesterdays_close(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(16, 16, 30), now=ny(17, 8))
        assert decision.reason is FreshnessReason.HAVE_POST_CLOSE_DATA
        assert decision.next_fetch_time == _utc(ny(17, 9, 30))

    def test_before_open_missing_yesterdays_close(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(16, 15), now=ny(17, 8))
        assert decision.should_fetch is True
        assert decision.reason is FreshnessReason.POST_CLOSE_CATCH_UP

    def test_monday_morning_with_friday_close(self):
        decision = should_fetch_data("NASDAQ", last_updated=ny(19, 17), now=ny(22, 7))
        assert decision.reason is FreshnessReason.HAVE_POST_CLOSE_DATA
        assert decision.next_fetch_time == _utc(ny(22, 9, 30))

    def test_lunch_break(self):
        """The lunch break is closed; data after the previous close waits for tomorrow."""
        decision = should_fetch_data("TSE", last_updated=tokyo(17, 11, 40), now=tokyo(17, 12))
        assert decision.should_fetch is False
        assert decision.reason is FreshnessReason.HAVE_POST_CLOSE_DATA
        assert decision.next_fetch_time == _utc(tokyo(18, 9))


class TestPolicyConfiguration:
    """Test custom thresholds and logging."""

    def test_custom_intraday_ceiling(self):
        policy = FreshnessPolicy(FreshnessParams(intraday_stale_minutes=5))
        query = FreshnessQuery("NASDAQ", last_updated=ny(17, 9, 54))
        decision = policy.decide(query, now=ny(17, 10))
        assert decision.should_fetch is True

    def test_custom_post_close_threshold(self):
        policy = FreshnessPolicy(FreshnessParams(post_close_refetch_minutes=20))
        query = FreshnessQuery("NASDAQ", last_updated=ny(17, 15, 59))
        assert policy.decide(query, now=ny(17, 16, 30)).reason is FreshnessReason.POST_CLOSE_CATCH_UP

    def test_params_passed_to_function(self):
        decision = should_fetch_data(
            "NASDAQ",
            last_updated=ny(17, 9, 50),
            now=ny(17, 10),
            params=FreshnessParams(intraday_stale_minutes=30),
        )
        assert decision.next_fetch_time == _utc(ny(17, 10, 20))

    def test_decision_is_logged(self):
        policy = FreshnessPolicy()
        policy.logger = Mock()
        bound = policy.logger.bind.return_value

        decision = policy.decide(FreshnessQuery("NASDAQ"), now=ny(17, 10))

        assert decision.should_fetch is True
        kwargs = policy.logger.bind.call_args.kwargs
        assert kwargs["exchange_code"] == "NASDAQ"
        assert kwargs["reason"] == "no_previous_data"
        bound.bind.return_value.info.assert_called_once_with("Fetch allowed")

    def test_skip_is_logged_at_debug(self):
        policy = FreshnessPolicy()
        policy.logger = Mock()

        policy.decide(FreshnessQuery("NASDAQ"), now=ny(20, 10))

        policy.logger.bind.return_value.bind.return_value.debug.assert_called_once_with("Fetch skipped")


class TestMalformedInput:
    """Test that bad timestamps fail instead of counting as missing data."""

    @pytest.mark.parametrize("raw", ["yesterday", "", True, [1, 2], float("nan")])
    def test_rejected(self, raw):
        with pytest.raises(MalformedDataError):
            should_fetch_data("NASDAQ", last_updated=raw, now=ny(17, 10))

    def test_rejected_before_bypass(self):
        with pytest.raises(MalformedDataError):
            should_fetch_data("NASDAQ", last_updated="not a date", force_refresh=True)
