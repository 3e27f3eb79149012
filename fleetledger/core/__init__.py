"""
Core infrastructure for the settlement engine.

This module provides:
- Config: Configuration management
- Exceptions: Validation, configuration and state errors
- Money: Decimal rounding helpers
"""

from .config import ConfigManager, DisputeRules, OpenDisputePolicy, SettlementRules, get_config
from .exceptions import (
    ConfigurationError,
    EngineError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "ConfigManager",
    "get_config",
    "SettlementRules",
    "DisputeRules",
    "OpenDisputePolicy",
    "EngineError",
    "ValidationError",
    "ConfigurationError",
    "InvalidStateError",
    "NotFoundError",
]
