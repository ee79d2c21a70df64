"""
Recurring transaction scheduling.
"""
from .cron import RecurrencePeriod, build_cron_trigger, cron_to_natural_language, recurrence_to_cron
from .service import RecurringTransactionScheduler

__all__ = [
    "RecurrencePeriod",
    "RecurringTransactionScheduler",
    "build_cron_trigger",
    "cron_to_natural_language",
    "recurrence_to_cron",
]
