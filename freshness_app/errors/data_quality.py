"""
Data quality error classifications for freshness inputs.

Raised when a caller hands the policy timestamps, windows or calendar
definitions it cannot interpret.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for input data issues the caller can correct."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class TemporalDataError(DataQualityError):
    """Timestamps out of order or otherwise inconsistent."""

    def __init__(self, message: str, timestamp: Optional[Any] = None,
                 expected_timestamp: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.expected_timestamp = expected_timestamp


class MissingDataError(DataQualityError):
    """Required data is completely missing."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format
