"""
Error classification for the freshness library.

Data quality errors describe bad caller input and are recoverable by the
caller. System failures describe broken configuration or scheduling state.
"""

from .data_quality import (
    DataQualityError,
    TemporalDataError,
    MissingDataError,
    MalformedDataError,
)
from .system_failures import (
    SystemFailureError,
    ConfigurationError,
    SchedulingError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "TemporalDataError",
    "MissingDataError",
    "MalformedDataError",
    # System Failures
    "SystemFailureError",
    "ConfigurationError",
    "SchedulingError",
]
