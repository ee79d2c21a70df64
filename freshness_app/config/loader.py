"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    ChartParams,
    DefaultConfig,
    FreshnessParams,
    IntervalParams,
    SchedulerParams,
    get_default_config,
)
from .validation import ConfigValidator


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_exchange_config(self, exchange_code: str) -> dict[str, Any]:
        """Load exchange-specific configuration overrides."""
        exchanges_file = self.config_dir / "exchanges.yaml"

        if not exchanges_file.exists():
            return {}

        with open(exchanges_file) as f:
            exchanges_config = yaml.safe_load(f) or {}

        return exchanges_config.get("exchanges", {}).get(exchange_code.upper(), {})  # type: ignore[no-any-return]

    def merge_config(
        self,
        exchange_code: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-call overrides (highest priority)
        2. Exchange-specific overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        exchange_config = self.load_exchange_config(exchange_code)
        config = self._deep_merge(config, exchange_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def build_config(
        self,
        exchange_code: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """
        Build a validated, typed configuration for an exchange.

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        config = self.merge_config(exchange_code, overrides)

        errors = ConfigValidator.validate_config(config)
        if errors:
            raise ConfigurationError(
                f"Invalid configuration for {exchange_code}",
                errors=errors,
                context={"exchange_code": exchange_code}
            )

        return DefaultConfig(
            freshness=FreshnessParams(**config["freshness"]),
            intervals=IntervalParams(**config["intervals"]),
            chart=ChartParams(**config["chart"]),
            scheduler=SchedulerParams(**config["scheduler"]),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
