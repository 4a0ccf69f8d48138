"""
Unit tests for configuration management.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from toggl_billing.config.settings import (
    BillingConfig,
    get_config,
    load_config,
    reload_config,
)


class TestBillingConfig:
    """Test cases for BillingConfig."""

    def test_config_with_valid_env_vars(self, test_config):
        assert test_config.toggl_api_token == "test-token"
        assert test_config.target_client == "Acme Corp"
        assert test_config.hourly_rate == Decimal("100")
        assert test_config.environment == "testing"
        assert test_config.log_level == "DEBUG"
        assert test_config.request_delay == 0

    def test_default_values(self, test_config):
        assert test_config.toggl_api_url == "https://api.track.toggl.com/api/v8"
        assert test_config.request_timeout == 30.0
        assert test_config.max_retries == 0
        assert test_config.lookback_weeks == 0
        assert test_config.invoicing_api_token is None
        assert test_config.invoicing_account is None

    def test_decimal_rate(self, mock_env, monkeypatch):
        monkeypatch.setenv("HOURLY_RATE", "85.50")

        assert load_config().hourly_rate == Decimal("85.50")

    def test_lookback_weeks(self, mock_env, monkeypatch):
        monkeypatch.setenv("LOOKBACK_WEEKS", "12")

        assert load_config().lookback_weeks == 12

    def test_target_client_trimmed(self, mock_env, monkeypatch):
        monkeypatch.setenv("TARGET_CLIENT", "  Acme Corp ")

        assert load_config().target_client == "Acme Corp"

    def test_missing_token(self, mock_env, monkeypatch):
        monkeypatch.delenv("TOGGL_API_TOKEN")

        with pytest.raises(ValidationError):
            BillingConfig()

    def test_blank_target_client(self, mock_env, monkeypatch):
        monkeypatch.setenv("TARGET_CLIENT", "   ")

        with pytest.raises(ValidationError, match="target_client"):
            BillingConfig()

    @pytest.mark.parametrize("rate", ["0", "-10", "abc"])
    def test_invalid_rate(self, mock_env, monkeypatch, rate):
        monkeypatch.setenv("HOURLY_RATE", rate)

        with pytest.raises(ValidationError):
            BillingConfig()

    def test_negative_lookback(self, mock_env, monkeypatch):
        monkeypatch.setenv("LOOKBACK_WEEKS", "-1")

        with pytest.raises(ValidationError):
            BillingConfig()

    def test_invalid_log_level(self, mock_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError, match="Log level"):
            BillingConfig()

    def test_log_level_normalized(self, mock_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        assert BillingConfig().log_level == "WARNING"

    def test_invalid_environment(self, mock_env, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")

        with pytest.raises(ValidationError, match="Environment"):
            BillingConfig()

    def test_log_dict_redaction_ready(self, test_config):
        data = test_config.to_log_dict()

        assert data["toggl_api_token"] == "test-token"
        assert data["hourly_rate"] == "100"


class TestConfigLoading:
    """Test the module-level configuration helpers."""

    def test_get_config_is_cached(self, mock_env):
        assert get_config() is get_config()

    def test_reload_config_replaces_instance(self, mock_env):
        first = get_config()

        assert reload_config() is not first

    def test_load_from_env_file(self, mock_env, monkeypatch, tmp_path):
        monkeypatch.delenv("TARGET_CLIENT")
        env_file = tmp_path / "billing.env"
        env_file.write_text("TARGET_CLIENT=Globex\n")

        config = load_config(str(env_file))

        assert config.target_client == "Globex"
