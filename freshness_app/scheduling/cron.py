"""
Cron expression helpers for recurring transactions.

Expressions use standard crontab fields (minute hour day month weekday,
optionally preceded by seconds) with weekday 0 = Sunday. APScheduler
numbers weekdays from Monday, so numeric weekdays are translated to names
before a trigger is built.
"""

from enum import Enum
from typing import Optional, Union

from apscheduler.triggers.cron import CronTrigger

from ..errors import MalformedDataError, SchedulingError

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Crontab weekday number -> APScheduler weekday name (7 is Sunday too)
_CRONTAB_WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class RecurrencePeriod(str, Enum):
    """Recurrence options offered when creating a transaction."""
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    QUARTER = "Quarter"


def recurrence_to_cron(
    period: Union[RecurrencePeriod, str],
    hour: int,
    minute: int = 0,
    day_of_week: Optional[int] = None,
    day_of_month: Optional[int] = None
) -> str:
    """
    Convert recurrence settings to a 5-field cron expression.

    Hour and minute are clamped to their valid ranges. Weekly recurrences
    default to Sunday, monthly and quarterly ones to the 1st.

    Raises:
        MalformedDataError: If the period is not a known recurrence
    """
    try:
        period = RecurrencePeriod(period)
    except ValueError as e:
        raise MalformedDataError(
            f"Invalid recurrence period: {period!r}",
            raw_data=str(period),
            expected_format=", ".join(p.value for p in RecurrencePeriod)
        ) from e

    hour = max(0, min(23, hour))
    minute = max(0, min(59, minute))

    if period is RecurrencePeriod.DAY:
        return f"{minute} {hour} * * *"
    if period is RecurrencePeriod.WEEK:
        return f"{minute} {hour} * * {day_of_week or 0}"
    if period is RecurrencePeriod.MONTH:
        return f"{minute} {hour} {day_of_month or 1} * *"
    return f"{minute} {hour} {day_of_month or 1} */3 *"


def _split_fields(expression: str) -> list[str]:
    """Return [second, minute, hour, day, month, weekday]."""
    parts = expression.split()
    if len(parts) == 5:
        return ["0", *parts]
    if len(parts) == 6:
        return parts
    raise SchedulingError(
        f"Cron expression must have 5 or 6 fields, got {len(parts)}",
        expression=expression
    )


def _translate_weekdays(field: str, expression: str) -> str:
    if field in ("*", "?"):
        return "*"

    names = []
    for part in field.split(","):
        span, _, step_text = part.partition("/")
        if span == "*":
            span = "0-6"

        start_text, _, end_text = span.partition("-")
        if not start_text.isdigit() or (end_text and not end_text.isdigit()) or (step_text and not step_text.isdigit()):
            # Already named (mon-fri) or something CronTrigger will judge
            names.append(part)
            continue

        start = int(start_text)
        end = int(end_text) if end_text else start
        step = int(step_text) if step_text else 1
        if end_text == "" and step_text:
            end = 6

        if not 0 <= start <= 7 or not 0 <= end <= 7 or start > end or step < 1:
            raise SchedulingError(f"Invalid weekday field: {field!r}", expression=expression)

        names.extend(_CRONTAB_WEEKDAYS[day] for day in range(start, end + 1, step))

    # Deduplicate (0 and 7 are both Sunday) while keeping order
    return ",".join(dict.fromkeys(names))


def build_cron_trigger(expression: str, timezone: str = "UTC") -> CronTrigger:
    """
    Build an APScheduler trigger from a crontab expression.

    Raises:
        SchedulingError: If the expression is not a valid cron schedule
    """
    if not expression or not expression.strip():
        raise SchedulingError("Empty cron expression", expression=expression)

    second, minute, hour, day, month, weekday = _split_fields(expression)

    try:
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=_translate_weekdays(weekday, expression),
            timezone=timezone,
        )
    except ValueError as e:
        raise SchedulingError(
            f"Invalid cron expression: {expression!r}",
            expression=expression
        ) from e


def _ordinal(num: int) -> str:
    if num % 10 == 1 and num % 100 != 11:
        return f"{num}st"
    if num % 10 == 2 and num % 100 != 12:
        return f"{num}nd"
    if num % 10 == 3 and num % 100 != 13:
        return f"{num}rd"
    return f"{num}th"


def _day_name(token: str) -> str:
    return DAY_NAMES[int(token) % 7]


def _month_name(token: str) -> str:
    month = int(token)
    if not 1 <= month <= 12:
        raise ValueError(token)
    return MONTH_NAMES[month - 1]


def _format_clock(hour: int, minute: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def cron_to_natural_language(expression: Optional[str]) -> str:
    """
    Describe a cron expression in plain English.

    Handles the expressions recurrence_to_cron produces plus simple lists
    and ranges; anything else is described as a custom schedule.
    """
    if not expression or not expression.strip():
        return "No recurrence"

    expression = expression.strip()
    if expression in ("0 0 * * *", "0 0 0 * * *"):
        return "Daily at midnight"
    if expression in ("0 0 * * 0", "0 0 0 * * 0"):
        return "Weekly on Sunday at midnight"
    if expression in ("0 0 1 * *", "0 0 0 1 * *"):
        return "Monthly on the 1st at midnight"

    try:
        _, minute, hour, day, month, weekday = _split_fields(expression)
    except SchedulingError:
        return "Custom schedule"

    try:
        if weekday != "*" and day == "*":
            if "," in weekday:
                result = "Weekly on " + ", ".join(_day_name(d) for d in weekday.split(","))
            elif "-" in weekday:
                start, end = weekday.split("-")
                result = f"Weekly from {_day_name(start)} to {_day_name(end)}"
            else:
                result = f"Weekly on {_day_name(weekday)}"
        elif day != "*" and weekday == "*":
            if "," in day:
                result = "Monthly on the " + ", ".join(_ordinal(int(d)) for d in day.split(","))
            else:
                result = f"Monthly on the {_ordinal(int(day))}"
        elif day != "*" and weekday != "*":
            result = f"On the {_ordinal(int(day))} and {_day_name(weekday)}"
        else:
            result = "Daily"

        if hour != "*" or minute != "*":
            hour_num = 0 if hour == "*" else int(hour)
            minute_num = 0 if minute == "*" else int(minute)
            result += f" at {_format_clock(hour_num, minute_num)}"

        if month.startswith("*/"):
            result += f" every {int(month[2:])} months"
        elif month != "*":
            result += " in " + ", ".join(_month_name(m) for m in month.split(","))
    except (ValueError, IndexError):
        return "Custom schedule"

    return result
