#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from spacex_agent.config.loader import ConfigLoader
from spacex_agent.config.validation import ConfigValidator
from spacex_agent.errors import ConfigurationError


def main():
    """Main validation function."""
    print("🔍 Validating SpaceX data agent configuration...")

    try:
        loader = ConfigLoader.create()
        config = loader.merge_config()
    except ConfigurationError as e:
        print(f"❌ Could not load configuration: {e}")
        sys.exit(1)

    for section, values in config.items():
        print(f"\n📋 {section}")
        for key, value in values.items():
            print(f"  • {key}: {value!r}")

    errors = ConfigValidator.validate_config(config)

    if errors:
        print(f"\n❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value!r})")
        sys.exit(1)

    print("\n🎉 Configuration is valid!")
    sys.exit(0)


if __name__ == "__main__":
    main()
