"""
Fetch-eligibility policy for market data refreshes.
"""
from .freshness import FreshnessPolicy, should_fetch_data
from .models import FreshnessDecision, FreshnessQuery, FreshnessReason

__all__ = [
    "FreshnessDecision",
    "FreshnessPolicy",
    "FreshnessQuery",
    "FreshnessReason",
    "should_fetch_data",
]
