#!/usr/bin/env python3
"""
Check a fleetledger installation.

This script:
- Verifies the Python version
- Loads the .env file
- Validates config/config.yaml against the settlement and dispute rules
- Checks that required packages import
"""

import os
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError


def check_python_version() -> bool:
    """Verify Python version is 3.12 or higher."""
    if sys.version_info < (3, 12):
        print(f"❌ Python 3.12+ required. Current version: {sys.version}")
        return False
    print(f"✅ Python version: {sys.version_info.major}.{sys.version_info.minor}")
    return True


def load_env() -> bool:
    """Load .env if present and report the settings in effect."""
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
        print("✅ .env file loaded")
    else:
        print("⚠️  .env file not found, using defaults (cp .env.example .env)")

    print(f"   LOG_LEVEL={os.getenv('LOG_LEVEL', 'INFO')}")
    print(f"   LOG_FORMAT={os.getenv('LOG_FORMAT', 'json')}")
    return True


def config_path() -> Path:
    config_dir = os.getenv("FLEETLEDGER_CONFIG_DIR") or "config"
    return Path(config_dir) / "config.yaml"


def check_config_file() -> bool:
    """Validate the business rules file."""
    path = config_path()
    if not path.exists():
        print(f"❌ Business rules not found: {path}")
        return False

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"❌ Error parsing {path}: {e}")
        return False

    if not config:
        print(f"❌ {path} is empty")
        return False

    from fleetledger.core.config import ConfigManager
    from fleetledger.engine.aggregation import reimbursable_methods
    from fleetledger.core.exceptions import ConfigurationError

    manager = ConfigManager(config_dir=path.parent)
    try:
        rules = manager.get_settlement_rules()
        reimbursable_methods(rules.reimbursable_paid_by)
        disputes = manager.get_dispute_rules()
    except (ValidationError, ConfigurationError) as e:
        print(f"❌ Invalid business rules in {path}: {e}")
        return False

    print(f"✅ {path} is valid")
    print(f"   Reimbursable paid-by: {', '.join(sorted(rules.reimbursable_paid_by))}")
    print(f"   Open dispute policy: {disputes.open_dispute_policy.value}")
    return True


def test_imports() -> bool:
    """Test that critical packages can be imported."""
    required_packages = [
        "pydantic",
        "pydantic_settings",
        "structlog",
        "yaml",
        "dotenv",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print(f"❌ Missing packages: {', '.join(missing)}")
        print("   Run: uv sync")
        return False

    print("✅ All required packages installed")
    return True


def main() -> int:
    """Run all setup checks."""
    print("=" * 60)
    print("fleetledger - Setup Check")
    print("=" * 60)

    checks = [
        ("Python version", check_python_version),
        ("Package imports", test_imports),
        ("Environment", load_env),
        ("Business rules", check_config_file),
    ]

    passed = 0
    failed = 0

    for name, check_func in checks:
        print(f"\nChecking {name}...")
        if check_func():
            passed += 1
        else:
            failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
