#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from smk_app.config.loader import ConfigLoader
from smk_app.config.validation import ConfigValidator


def main():
    """Validate settings.yaml merged over the defaults."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)

    print(f"Validating configuration in {loader.config_dir}...")

    overrides = loader.load_overrides()
    if not overrides:
        print("No settings.yaml found, using defaults")

    errors = ConfigValidator.validate_config(loader.merge_config(overrides))
    if errors:
        print(f"Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return 1

    print("Configuration is valid")
    return 0


if __name__ == "__main__":
    sys.exit(main())
