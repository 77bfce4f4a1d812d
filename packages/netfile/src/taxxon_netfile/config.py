"""Configuration system for Taxxon.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the filing service.

Usage:
    from taxxon_netfile.config import TaxxonConfig

    # Load from environment variables and .env file
    config = TaxxonConfig()

    # Access NETFILE settings
    print(config.netfile.provider)

    # Apply logging settings
    config.configure_logging()
"""

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from taxxon_netfile.log import VALID_LEVELS, configure_logging


class NetfileProviderName(str, Enum):
    """Registered NETFILE partner providers."""

    MOCK = "mock"


class NetfileConfig(BaseSettings):
    """NETFILE submission settings.

    Selects the filing-partner provider and tunes the mock provider. Supports
    environment variables with the prefix TAXXON_NETFILE_.

    Environment Variables:
        TAXXON_NETFILE_PROVIDER: Provider key (mock)
        TAXXON_NETFILE_ACCEPTANCE_DELAY_SECONDS: Mock delay before a submission is accepted
        TAXXON_NETFILE_MIN_TAX_YEAR: Earliest tax year the mock provider accepts
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXXON_NETFILE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = Field(
        default=NetfileProviderName.MOCK.value,
        description="Key of the NETFILE provider to use",
    )
    acceptance_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Seconds after submission before the mock provider reports acceptance",
    )
    min_tax_year: int = Field(
        default=2020,
        ge=2000,
        description="Earliest tax year the mock provider accepts",
    )

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Normalize the provider key; unknown keys are rejected by the service."""
        if not v or not v.strip():
            raise ValueError("Provider name cannot be empty")
        return v.strip().lower()


class TaxxonConfig(BaseSettings):
    """Root configuration for Taxxon.

    Environment Variables:
        TAXXON_ENV: Environment name (development, staging, production, test)
        TAXXON_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        TAXXON_JSON_LOGS: Render logs as JSON (defaults to on in production)

    Example:
        # Override specific settings
        config = TaxxonConfig(
            env="test",
            netfile=NetfileConfig(acceptance_delay_seconds=0),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXXON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment settings
    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render log events as JSON",
    )

    # Nested configuration
    netfile: NetfileConfig = Field(default_factory=NetfileConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        v_upper = v.upper().strip()
        if v_upper not in VALID_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {set(VALID_LEVELS)}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"

    def configure_logging(self) -> None:
        """Apply the logging settings; production always logs JSON."""
        configure_logging(
            level=self.log_level,
            json_output=self.json_logs or self.is_production,
        )
