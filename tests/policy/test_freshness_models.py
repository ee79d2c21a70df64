"""Tests for freshness query and decision models."""

from datetime import datetime, timezone

import pytest

from freshness_app.errors import MalformedDataError
from freshness_app.policy import FreshnessDecision, FreshnessQuery, FreshnessReason


class TestFreshnessQuery:
    """Test query construction and normalization."""

    def test_defaults(self):
        query = FreshnessQuery("NYSE")
        assert query.timezone_hint is None
        assert query.last_updated is None
        assert query.force_refresh is False

    def test_naive_last_updated_is_utc(self):
        query = FreshnessQuery("NYSE", last_updated=datetime(2024, 1, 17, 15, 0))
        assert query.last_updated == datetime(2024, 1, 17, 15, 0, tzinfo=timezone.utc)

    def test_rejects_non_datetime(self):
        with pytest.raises(MalformedDataError):
            FreshnessQuery("NYSE", last_updated="2024-01-17")  # type: ignore[arg-type]

    def test_rejects_non_string_code(self):
        with pytest.raises(MalformedDataError):
            FreshnessQuery(42)  # type: ignore[arg-type]

    def test_rejects_non_string_timezone(self):
        with pytest.raises(MalformedDataError):
            FreshnessQuery("NYSE", timezone_hint=5)  # type: ignore[arg-type]

    def test_is_immutable(self):
        query = FreshnessQuery("NYSE")
        with pytest.raises(AttributeError):
            query.exchange_code = "LSE"  # type: ignore[misc]


class TestFromRaw:
    """Test parsing of stored asset metadata."""

    def test_epoch_milliseconds_string(self):
        query = FreshnessQuery.from_raw("NMS", last_updated="1705503000000")
        assert query.last_updated == datetime(2024, 1, 17, 14, 50, tzinfo=timezone.utc)

    def test_epoch_seconds(self):
        query = FreshnessQuery.from_raw("NMS", last_updated=1705503000)
        assert query.last_updated == datetime(2024, 1, 17, 14, 50, tzinfo=timezone.utc)

    def test_iso_with_offset(self):
        query = FreshnessQuery.from_raw("NMS", last_updated="2024-01-17T09:50:00-05:00")
        assert query.last_updated == datetime(2024, 1, 17, 14, 50, tzinfo=timezone.utc)

    def test_none_means_no_data(self):
        assert FreshnessQuery.from_raw("NMS", last_updated=None).last_updated is None

    def test_force_refresh_is_coerced(self):
        assert FreshnessQuery.from_raw("NMS", force_refresh=1).force_refresh is True

    def test_garbage_rejected(self):
        with pytest.raises(MalformedDataError) as exc_info:
            FreshnessQuery.from_raw("NMS", last_updated="last tuesday")

        assert exc_info.value.raw_data == "last tuesday"


class TestFreshnessDecision:
    """Test decision rendering."""

    def test_to_dict_with_next_fetch(self):
        decision = FreshnessDecision(
            should_fetch=False,
            reason=FreshnessReason.FRESH_DURING_SESSION,
            next_fetch_time=datetime(2024, 1, 17, 15, 5, tzinfo=timezone.utc),
        )
        assert decision.to_dict() == {
            "should_fetch": False,
            "reason": "fresh_during_session",
            "message": "Market open - data fresh",
            "next_fetch_time": "2024-01-17T15:05:00+00:00",
        }

    def test_to_dict_without_next_fetch(self):
        decision = FreshnessDecision(should_fetch=True, reason=FreshnessReason.FORCED)
        assert decision.to_dict()["next_fetch_time"] is None
        assert decision.message == "Force refresh requested"

    def test_every_reason_has_a_message(self):
        for reason in FreshnessReason:
            assert reason.message
