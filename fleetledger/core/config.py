"""
Configuration management for the settlement engine.

Handles loading and accessing:
- Business rules (config/config.yaml)
- Environment variables (.env)
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class OpenDisputePolicy(str, Enum):
    """What happens when a driver disputes a load that already has an open dispute."""

    REJECT = "reject"
    SUPERSEDE = "supersede"


class SettlementRules(BaseModel):
    """Business rules for settlement computation."""

    reimbursable_paid_by: frozenset[str] = Field(
        default_factory=lambda: frozenset({"driver_personal"})
    )
    minimum_trip_days: int = Field(1, ge=1)


class DisputeRules(BaseModel):
    """Business rules for balance disputes."""

    open_dispute_policy: OpenDisputePolicy = OpenDisputePolicy.REJECT


class EnvironmentSettings(BaseSettings):
    """Environment variables configuration."""

    config_dir: Optional[str] = Field(None, alias="FLEETLEDGER_CONFIG_DIR")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = Field("json", alias="LOG_FORMAT")

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


class ConfigManager:
    """
    Central configuration manager for the settlement engine.

    Loads and provides access to:
    - Business rules from config/config.yaml
    - Environment variables from .env
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional path to config directory. Defaults to
                FLEETLEDGER_CONFIG_DIR (environment or .env), then
                project root/config.
        """
        self._business_config: Optional[dict[str, Any]] = None
        self._env_settings: Optional[EnvironmentSettings] = None

        if config_dir is None:
            if self.env.config_dir:
                config_dir = Path(self.env.config_dir)
            else:
                project_root = Path(__file__).parent.parent.parent
                config_dir = project_root / "config"

        self.config_dir = Path(config_dir)

    @property
    def business_config(self) -> dict[str, Any]:
        """Load and return business configuration from config.yaml."""
        if self._business_config is None:
            config_path = self.config_dir / "config.yaml"
            with open(config_path, "r") as f:
                self._business_config = yaml.safe_load(f) or {}
        return self._business_config

    @property
    def env(self) -> EnvironmentSettings:
        """Load and return environment settings."""
        if self._env_settings is None:
            self._env_settings = EnvironmentSettings()
        return self._env_settings

    def get_settlement_rules(self) -> SettlementRules:
        """Get settlement rules from business config."""
        return SettlementRules(**self.business_config.get("settlement", {}))

    def get_dispute_rules(self) -> DisputeRules:
        """Get balance dispute rules from business config."""
        return DisputeRules(**self.business_config.get("disputes", {}))

    def get_company_info(self) -> dict[str, Any]:
        """Get carrier company information from business config."""
        return self.business_config.get("company", {})


# Global config instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """
    Get the global configuration manager instance.

    Returns:
        ConfigManager singleton instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
