"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .defaults import ChartParams, FreshnessParams, IntervalParams, SchedulerParams


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _unknown_fields(params: dict[str, Any], params_cls: type) -> list[ValidationError]:
    known = {f.name for f in fields(params_cls)}
    return [
        ValidationError(field=key, message="Unknown parameter", value=value)
        for key, value in params.items()
        if key not in known
    ]


def _positive_int(params: dict[str, Any], field: str) -> list[ValidationError]:
    if field not in params:
        return []
    value = params[field]
    if not _is_int(value) or value <= 0:
        return [ValidationError(field=field, message="Must be a positive integer", value=value)]
    return []


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_freshness_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate freshness policy parameters."""
        errors = _unknown_fields(params, FreshnessParams)

        errors.extend(_positive_int(params, "intraday_stale_minutes"))
        errors.extend(_positive_int(params, "post_close_refetch_minutes"))
        errors.extend(_positive_int(params, "search_horizon_days"))

        return errors

    @staticmethod
    def validate_interval_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate interval look-back limits."""
        errors = _unknown_fields(params, IntervalParams)

        for name in ("one_minute_lookback_days", "intraday_lookback_days", "hourly_lookback_days"):
            errors.extend(_positive_int(params, name))

        if errors:
            return errors

        # Finer bars can never reach further back than coarser ones
        defaults = IntervalParams()
        one_minute = params.get("one_minute_lookback_days", defaults.one_minute_lookback_days)
        intraday = params.get("intraday_lookback_days", defaults.intraday_lookback_days)
        hourly = params.get("hourly_lookback_days", defaults.hourly_lookback_days)

        if not one_minute <= intraday <= hourly:
            errors.append(ValidationError(
                field="intraday_lookback_days",
                message="Look-back limits must not decrease from 1m to 60m",
                value=(one_minute, intraday, hourly)
            ))

        return errors

    @staticmethod
    def validate_chart_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate chart planning parameters."""
        errors = _unknown_fields(params, ChartParams)

        errors.extend(_positive_int(params, "default_lookback_years"))

        if "min_fetch_window_minutes" in params:
            value = params["min_fetch_window_minutes"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="min_fetch_window_minutes",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_scheduler_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate scheduler parameters."""
        errors = _unknown_fields(params, SchedulerParams)

        if "timezone" in params:
            value = params["timezone"]
            try:
                if not isinstance(value, str):
                    raise ValueError(value)
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(ValidationError(
                    field="timezone",
                    message="Must be an IANA timezone name",
                    value=value
                ))

        errors.extend(_positive_int(params, "misfire_grace_seconds"))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        validators = {
            "freshness": ConfigValidator.validate_freshness_params,
            "intervals": ConfigValidator.validate_interval_params,
            "chart": ConfigValidator.validate_chart_params,
            "scheduler": ConfigValidator.validate_scheduler_params,
        }

        for section, params in config.items():
            validator = validators.get(section)
            if validator is None:
                errors.append(ValidationError(field=section, message="Unknown section", value=params))
            elif not isinstance(params, dict):
                errors.append(ValidationError(field=section, message="Must be a mapping", value=params))
            else:
                errors.extend(validator(params))

        return errors
