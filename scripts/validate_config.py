#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from freshness_app.config.loader import ConfigLoader
from freshness_app.config.validation import ConfigValidator, ValidationError
from freshness_app.errors import ConfigurationError
from freshness_app.markets import supported_exchanges


def validate_exchange_config(loader: ConfigLoader, exchange_code: str) -> List[ValidationError]:
    """Validate configuration for a specific exchange."""
    config = loader.merge_config(exchange_code)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("🔍 Validating market freshness configuration...")

    loader = ConfigLoader.create()

    # Every known exchange plus one that should use defaults
    exchange_codes = supported_exchanges() + ["UNKNOWN-EXCHANGE"]

    all_valid = True

    for exchange_code in exchange_codes:
        errors = validate_exchange_config(loader, exchange_code)

        if errors:
            print(f"❌ {exchange_code}: {len(errors)} validation errors")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print(f"✅ {exchange_code} configuration is valid")

    # Per-call overrides must go through the same validation
    print(f"\n📋 Testing per-call overrides...")
    test_overrides = {
        "freshness": {
            "intraday_stale_minutes": 5,
            "post_close_refetch_minutes": 30,
        }
    }

    try:
        config = loader.build_config("NYSE", test_overrides)
        print(f"✅ Override validation passed "
              f"(intraday ceiling {config.freshness.intraday_stale_minutes} min)")
    except ConfigurationError as e:
        print(f"❌ Override validation failed:")
        for error in e.errors:
            print(f"  • {error.field}: {error.message}")
        all_valid = False

    if all_valid:
        print(f"\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print(f"\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
