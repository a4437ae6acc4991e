"""
Configuration management for the billing engine.
"""

import logging
import signal
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class StopTimeConfig(BaseSettings):
    """Configuration settings for the billing engine."""

    # Billing defaults
    default_hourly_rate: Decimal = Field(
        default=Decimal("20.00"), alias="DEFAULT_HOURLY_RATE"
    )
    default_vat_rate: Decimal = Field(default=Decimal("21.0"), alias="DEFAULT_VAT_RATE")
    time_resolution_minutes: int = Field(default=1, alias="TIME_RESOLUTION_MINUTES")

    # Storage and output
    database_url: str = Field(default="sqlite:///stoptime.db", alias="DATABASE_URL")
    document_dir: str = Field(default="invoices", alias="DOCUMENT_DIR")

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Invoice creation retries on number conflicts
    max_retries: int = Field(default=3, alias="MAX_RETRIES")
    retry_delay: float = Field(default=0.1, alias="RETRY_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
    )

    @field_validator("default_hourly_rate")
    @classmethod
    def validate_hourly_rate(cls, v):
        """Ensure the default hourly rate is not negative."""
        if v < 0:
            raise ValueError("Default hourly rate cannot be negative")
        return v

    @field_validator("default_vat_rate")
    @classmethod
    def validate_vat_rate(cls, v):
        """Ensure the VAT rate is a percentage."""
        if v < 0 or v > 100:
            raise ValueError("Default VAT rate must be between 0 and 100")
        return v

    @field_validator("time_resolution_minutes")
    @classmethod
    def validate_time_resolution(cls, v):
        """Ensure the time resolution is a positive number of minutes."""
        if v <= 0:
            raise ValueError("Time resolution must be a positive number of minutes")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()


def load_config(env_file: Optional[str] = None) -> StopTimeConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file, override=True)
    else:
        load_dotenv()

    return StopTimeConfig()


# Global configuration instance
_config: Optional[StopTimeConfig] = None


def get_config() -> StopTimeConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> StopTimeConfig:
    """Reload configuration (on operator signal, or in tests)."""
    global _config
    _config = load_config(env_file)
    return _config


def install_reload_handler(
    env_file: Optional[str] = None, signum: int = getattr(signal, "SIGHUP", 1)
) -> None:
    """Reload the configuration whenever the process receives ``signum``.

    Args:
        env_file: Optional .env file to re-read on reload
        signum: Signal number to listen for (SIGHUP by default)
    """

    def _handle(received, frame):
        try:
            config = reload_config(env_file)
        except ValueError as e:
            # pydantic's ValidationError derives from ValueError
            logger.error(f"Configuration reload failed, keeping old settings: {e}")
            return
        logger.info(
            f"Configuration reloaded (resolution={config.time_resolution_minutes}m, "
            f"hourly_rate={config.default_hourly_rate}, vat={config.default_vat_rate}%)"
        )

    signal.signal(signum, _handle)
