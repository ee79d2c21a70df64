"""Default configuration parameters for the freshness policy and planner."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FreshnessParams:
    """Fetch-eligibility thresholds."""
    intraday_stale_minutes: int = 15          # Staleness ceiling while a session is open
    post_close_refetch_minutes: int = 60      # Min gap before the post-close catch-up fetch
    search_horizon_days: int = 7              # Next-open / last-close scan limit


@dataclass(frozen=True)
class IntervalParams:
    """Provider look-back limits per granularity family, in days."""
    one_minute_lookback_days: int = 7         # 1m bars
    intraday_lookback_days: int = 60          # 5m, 15m, 30m bars
    hourly_lookback_days: int = 730           # 60m bars


@dataclass(frozen=True)
class ChartParams:
    """Chart request planning parameters."""
    default_lookback_years: int = 5           # Window start when nothing is stored
    min_fetch_window_minutes: int = 15        # Shorter windows are not worth a call


@dataclass(frozen=True)
class SchedulerParams:
    """Recurring transaction scheduler parameters."""
    timezone: str = "UTC"
    misfire_grace_seconds: int = 300


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    freshness: FreshnessParams
    intervals: IntervalParams
    chart: ChartParams
    scheduler: SchedulerParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        freshness=FreshnessParams(),
        intervals=IntervalParams(),
        chart=ChartParams(),
        scheduler=SchedulerParams(),
    )
