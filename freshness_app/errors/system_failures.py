"""
System failure error classifications.

These represent broken configuration or scheduler state that needs an
operator to fix rather than a retry.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ConfigurationError(SystemFailureError):
    """Configuration overrides failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class SchedulingError(SystemFailureError):
    """Recurring job could not be registered with the scheduler."""

    def __init__(self, message: str, transaction_id: Optional[int] = None,
                 expression: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.transaction_id = transaction_id
        self.expression = expression
