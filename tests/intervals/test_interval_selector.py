"""Tests for granularity selection of historical windows."""

from datetime import datetime, timedelta, timezone

import pytest

from freshness_app.config.defaults import IntervalParams
from freshness_app.errors import MalformedDataError
from freshness_app.intervals import (
    PROVIDER_INTERVALS,
    Granularity,
    build_rules,
    describe_interval,
    fallback_interval,
    select_interval,
)

NOW = datetime(2024, 1, 17, 12, 0, tzinfo=timezone.utc)


def _window(days_ago: float, span: timedelta):
    start = NOW - timedelta(days=days_ago)
    return start, start + span


class TestLookbackDominates:
    """Test that provider look-back limits override window length."""

    def test_recent_short_window_is_five_minutes(self):
        start, end = _window(3, timedelta(hours=2))
        assert select_interval(start, end, now=NOW) is Granularity.FIVE_MINUTES

    def test_old_short_window_is_daily(self):
        start, end = _window(100, timedelta(hours=2))
        assert select_interval(start, end, now=NOW) is Granularity.DAILY

    def test_one_minute_needs_last_week(self):
        start, end = _window(8, timedelta(hours=1))
        assert select_interval(start, end, now=NOW) is Granularity.FIVE_MINUTES

    def test_intraday_beyond_sixty_days(self):
        start, end = _window(61, timedelta(days=2))
        assert select_interval(start, end, now=NOW) is Granularity.DAILY

    def test_hourly_beyond_two_years(self):
        start, end = _window(800, timedelta(days=30))
        assert select_interval(start, end, now=NOW) is Granularity.DAILY


class TestSpanRules:
    """Test each granularity's span band."""

    @pytest.mark.parametrize("days_ago,span,expected", [
        (1, timedelta(hours=1), Granularity.ONE_MINUTE),
        (2, timedelta(hours=20), Granularity.FIVE_MINUTES),
        (10, timedelta(days=2), Granularity.FIFTEEN_MINUTES),
        (10, timedelta(days=3), Granularity.FIFTEEN_MINUTES),
        (30, timedelta(days=5), Granularity.THIRTY_MINUTES),
        (30, timedelta(days=7), Granularity.THIRTY_MINUTES),
        (200, timedelta(days=30), Granularity.SIXTY_MINUTES),
        (200, timedelta(days=60), Granularity.SIXTY_MINUTES),
        (400, timedelta(days=90), Granularity.DAILY),
    ])
    def test_band(self, days_ago, span, expected):
        start, end = _window(days_ago, span)
        assert select_interval(start, end, now=NOW) is expected

    def test_span_hours_round_half_up(self):
        start, end = _window(1, timedelta(hours=1, minutes=29))
        assert select_interval(start, end, now=NOW) is Granularity.ONE_MINUTE

        start, end = _window(1, timedelta(hours=1, minutes=30))
        assert select_interval(start, end, now=NOW) is Granularity.FIVE_MINUTES

    def test_span_days_round_half_up(self):
        start, end = _window(10, timedelta(days=1, hours=11))
        assert select_interval(start, end, now=NOW) is Granularity.FIVE_MINUTES

        start, end = _window(10, timedelta(days=1, hours=12))
        assert select_interval(start, end, now=NOW) is Granularity.FIFTEEN_MINUTES

    def test_empty_recent_window(self):
        assert select_interval(NOW, NOW, now=NOW) is Granularity.ONE_MINUTE


class TestSelection:
    """Test totality, overrides and measurements."""

    def test_always_returns_one_tag(self):
        for days_ago in (0, 1, 5, 30, 59, 61, 365, 729, 731, 3650):
            for span_days in (0, 0.5, 1, 2, 4, 8, 59, 61, 365):
                start, end = _window(days_ago, timedelta(days=span_days))
                assert select_interval(start, end, now=NOW) in Granularity

    def test_force_daily(self):
        start, end = _window(1, timedelta(hours=1))
        assert select_interval(start, end, now=NOW, force_daily=True) is Granularity.DAILY

    def test_custom_lookback_limits(self):
        params = IntervalParams(one_minute_lookback_days=1)
        start, end = _window(2, timedelta(hours=1))
        assert select_interval(start, end, now=NOW, params=params) is Granularity.FIVE_MINUTES

    def test_describe_interval_measurements(self):
        start, end = _window(3, timedelta(hours=2))
        selection = describe_interval(start, end, now=NOW)

        assert selection.lookback_days == 3
        assert selection.span_hours == 2
        assert selection.span_days == 0
        assert selection.granularity is Granularity.FIVE_MINUTES
        assert selection.now == NOW

    def test_naive_window_is_utc(self):
        start = datetime(2024, 1, 14, 12, 0)
        selection = describe_interval(start, start + timedelta(hours=2), now=NOW)
        assert selection.window_start.tzinfo is timezone.utc
        assert selection.lookback_days == 3

    def test_fallback_is_daily(self):
        assert fallback_interval() is Granularity.DAILY


class TestGranularity:
    """Test the granularity tags."""

    def test_every_tag_is_a_provider_interval(self):
        for granularity in Granularity:
            assert granularity.value in PROVIDER_INTERVALS

    def test_minutes(self):
        assert Granularity.FIFTEEN_MINUTES.minutes == 15
        assert Granularity.DAILY.minutes == 1440
        assert not Granularity.DAILY.is_intraday
        assert Granularity.ONE_MINUTE.is_intraday

    def test_parse(self):
        assert Granularity.parse("30m") is Granularity.THIRTY_MINUTES
        with pytest.raises(MalformedDataError):
            Granularity.parse("1h")

    def test_rules_are_finest_first(self):
        rules = build_rules()
        assert [rule.granularity for rule in rules] == [
            Granularity.ONE_MINUTE,
            Granularity.FIVE_MINUTES,
            Granularity.FIFTEEN_MINUTES,
            Granularity.THIRTY_MINUTES,
            Granularity.SIXTY_MINUTES,
        ]
        assert rules[-1].max_lookback_days == 730
