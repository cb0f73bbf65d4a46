#!/usr/bin/env python3
"""Settings file validation script."""

import sys
from pathlib import Path
from typing import List, Optional

import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quotebar_app.config.loader import SettingsRepository
from quotebar_app.config.validation import ConfigValidator, ValidationError, normalize_settings
from quotebar_app.errors import ConfigError


def validate_settings_file(path: Path) -> List[ValidationError]:
    """Validate the raw mapping stored in a settings file."""
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        return [ValidationError(field="<root>", message="Must be a mapping", value=raw)]
    return ConfigValidator.validate_settings(raw)


def main(config_dir: Optional[str] = None):
    """Main validation function."""
    repo = SettingsRepository.create(Path(config_dir) if config_dir else None)
    path = repo.settings_file
    print(f"🔍 Validating quotebar settings at {path}...")

    if not path.exists():
        print("ℹ️  No settings file, defaults will be used")
        sys.exit(0)

    try:
        errors = validate_settings_file(path)
    except (OSError, yaml.YAMLError) as e:
        print(f"❌ Could not read settings: {e}")
        sys.exit(1)

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
    else:
        print("✅ Settings are valid")

    try:
        with open(path, encoding="utf-8") as f:
            config = normalize_settings(yaml.safe_load(f))
    except ConfigError as e:
        print(f"❌ Settings unusable, defaults would be used: {e}")
        sys.exit(1)

    print(f"\n📋 Effective instruments: {', '.join(config.codes) or '(none)'}")
    print(f"   display_mode={config.display_mode.value} refresh={config.refresh_interval:g}s "
          f"rotate={config.rotate_interval:g}s")

    sys.exit(1 if errors else 0)


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
