"""Configuration loading for CLI commands."""

import logging
from typing import Optional

from pydantic import ValidationError

from toggl_billing.cli.error_handlers import ConfigurationError
from toggl_billing.config.logging_config import LoggingConfig, configure_logging
from toggl_billing.config.settings import BillingConfig, get_config, reload_config
from toggl_billing.utils.logging_utils import sanitize_sensitive_data

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging from the environment; ``--debug`` forces DEBUG."""
    logging_config = LoggingConfig.from_env()
    if debug:
        logging_config.log_level = "DEBUG"
    configure_logging(logging_config)


def load_settings(env_file: Optional[str] = None) -> BillingConfig:
    """Load settings, turning validation failures into a ConfigurationError."""
    try:
        config = reload_config(env_file) if env_file else get_config()
    except ValidationError as e:
        missing = sorted(
            str(error["loc"][0]) for error in e.errors() if error["type"] == "missing"
        )
        message = (
            f"missing settings: {', '.join(missing)}"
            if missing
            else f"invalid settings: {e.errors()[0]['msg']}"
        )
        raise ConfigurationError(
            message,
            recovery_hint=(
                "Set TOGGL_API_TOKEN, TARGET_CLIENT and HOURLY_RATE in the "
                "environment or a .env file"
            ),
        ) from e

    logger.debug(f"Loaded configuration: {sanitize_sensitive_data(config.to_log_dict())}")
    return config
