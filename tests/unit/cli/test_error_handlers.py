"""Unit tests for CLI error reporting and exit codes."""

import click
import pytest

from toggl_billing.calculators.billing_period import InvalidTimezoneError
from toggl_billing.cli.error_handlers import (
    EXIT_ABORTED,
    EXIT_API,
    EXIT_CONFIGURATION,
    EXIT_DATA,
    EXIT_STORE,
    EXIT_UNEXPECTED,
    ConfigurationError,
    handle_cli_error,
    with_error_handling,
)
from toggl_billing.models.toggl import MalformedRecordError
from toggl_billing.services.toggl_client import TogglAPIError
from toggl_billing.storage.billed_store import BilledStoreError


class TestHandleCliError:
    """Test mapping of errors to exit codes."""

    @pytest.mark.parametrize(
        "error, exit_code",
        [
            (ConfigurationError("missing settings: TARGET_CLIENT"), EXIT_CONFIGURATION),
            (TogglAPIError("GET /me failed with HTTP 500", status_code=500), EXIT_API),
            (MalformedRecordError("Entry 3 has no duration"), EXIT_DATA),
            (InvalidTimezoneError("Unknown timezone: Mars/Base"), EXIT_DATA),
            (BilledStoreError("Commit failed"), EXIT_STORE),
            (click.Abort(), EXIT_ABORTED),
            (KeyboardInterrupt(), EXIT_ABORTED),
            (RuntimeError("boom"), EXIT_UNEXPECTED),
        ],
    )
    def test_exit_codes(self, error, exit_code, capsys):
        assert handle_cli_error(error) == exit_code

    def test_configuration_hint(self, capsys):
        handle_cli_error(ConfigurationError("bad", recovery_hint="Set HOURLY_RATE"))

        err = capsys.readouterr().err
        assert "Configuration Error: bad" in err
        assert "Hint: Set HOURLY_RATE" in err

    @pytest.mark.parametrize(
        "status_code, hint",
        [(401, "TOGGL_API_TOKEN"), (429, "REQUEST_DELAY"), (None, "network")],
    )
    def test_api_hints(self, status_code, hint, capsys):
        handle_cli_error(TogglAPIError("failed", status_code=status_code))

        assert hint in capsys.readouterr().err

    def test_unexpected_error_trace_only_in_debug(self, capsys):
        handle_cli_error(RuntimeError("boom"))
        assert "Full stack trace" not in capsys.readouterr().err

        handle_cli_error(RuntimeError("boom"), debug=True)
        assert "Full stack trace" in capsys.readouterr().err


class TestWithErrorHandling:
    def test_exits_with_code(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            with with_error_handling():
                raise BilledStoreError("disk full")

        assert exc_info.value.code == EXIT_STORE

    def test_keyboard_interrupt_exits_as_abort(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            with with_error_handling():
                raise KeyboardInterrupt

        assert exc_info.value.code == EXIT_ABORTED
        assert "Operation cancelled by user" in capsys.readouterr().err

    def test_click_exceptions_pass_through(self):
        with pytest.raises(click.UsageError):
            with with_error_handling():
                raise click.UsageError("bad usage")

    def test_no_error(self):
        with with_error_handling():
            value = 1

        assert value == 1
