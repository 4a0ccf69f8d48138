"""
Configuration management for the billing reconciler.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BillingConfig(BaseSettings):
    """Configuration settings for the billing reconciler."""

    # Toggl API Configuration
    toggl_api_token: str = Field(alias="TOGGL_API_TOKEN")
    toggl_api_url: str = Field(
        default="https://api.track.toggl.com/api/v8", alias="TOGGL_API_URL"
    )

    # Invoicing
    target_client: str = Field(alias="TARGET_CLIENT")
    hourly_rate: Decimal = Field(gt=0, alias="HOURLY_RATE")

    # Invoicing service credentials (reserved, not used by reconciliation)
    invoicing_api_token: Optional[str] = Field(
        default=None, alias="INVOICING_API_TOKEN"
    )
    invoicing_account: Optional[str] = Field(default=None, alias="INVOICING_ACCOUNT")

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Processing Configuration
    request_delay: float = Field(default=1.0, ge=0, alias="REQUEST_DELAY")
    request_timeout: float = Field(default=30.0, gt=0, alias="REQUEST_TIMEOUT")
    max_retries: int = Field(default=0, ge=0, alias="MAX_RETRIES")
    lookback_weeks: int = Field(default=0, ge=0, alias="LOOKBACK_WEEKS")
    billed_store_path: str = Field(
        default="data/billed.sqlite3", alias="BILLED_STORE_PATH"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
    )

    @field_validator("toggl_api_token", "target_client")
    @classmethod
    def validate_not_blank(cls, v, info):
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

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

    def to_log_dict(self) -> Dict[str, Any]:
        """Configuration as a plain dictionary, suitable for sanitized logging."""
        return self.model_dump(mode="json")


def load_config(env_file: Optional[str] = None) -> BillingConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return BillingConfig()


# Global configuration instance
_config: Optional[BillingConfig] = None


def get_config() -> BillingConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> BillingConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
