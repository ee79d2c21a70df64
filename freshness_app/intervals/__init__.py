"""
Sampling-interval selection for historical price windows.
"""
from .granularity import PROVIDER_INTERVALS, Granularity, GranularityRule, build_rules
from .selector import IntervalSelection, describe_interval, fallback_interval, select_interval

__all__ = [
    "PROVIDER_INTERVALS",
    "Granularity",
    "GranularityRule",
    "IntervalSelection",
    "build_rules",
    "describe_interval",
    "fallback_interval",
    "select_interval",
]
