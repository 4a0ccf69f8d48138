"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click

from toggl_billing.calculators.billing_period import InvalidTimezoneError
from toggl_billing.cli.utils.formatters import format_error, format_warning
from toggl_billing.models.toggl import MalformedRecordError
from toggl_billing.services.toggl_client import TogglAPIError
from toggl_billing.storage.billed_store import BilledStoreError

EXIT_CONFIGURATION = 1
EXIT_API = 2
EXIT_DATA = 3
EXIT_STORE = 4
EXIT_ABORTED = 130
EXIT_UNEXPECTED = 255


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""


def _report(title: str, message: str, hint: Optional[str] = None) -> None:
    click.echo(format_error(f"{title}: {message}"), err=True)
    if hint:
        click.echo(format_warning(f"Hint: {hint}"), err=True)


def handle_cli_error(error: BaseException, debug: bool = False) -> int:
    """
    Report an error and pick the exit code.

    Args:
        error: The exception that aborted the command
        debug: Whether to show the full stack trace for unexpected errors

    Returns:
        Exit code (1 configuration, 2 API, 3 malformed data, 4 store,
        130 user abort, 255 anything else)
    """
    if isinstance(error, ConfigurationError):
        _report("Configuration Error", error.message, error.recovery_hint)
        return EXIT_CONFIGURATION

    if isinstance(error, TogglAPIError):
        hint = None
        if error.status_code in (401, 403):
            hint = "Check TOGGL_API_TOKEN in your environment or .env file"
        elif error.status_code == 429:
            hint = "Rate limited; wait a minute or raise REQUEST_DELAY"
        elif error.status_code is None:
            hint = "Check your network connection; set MAX_RETRIES to retry"
        _report("API Error", str(error), hint)
        return EXIT_API

    if isinstance(error, (MalformedRecordError, InvalidTimezoneError)):
        _report("Data Error", str(error))
        return EXIT_DATA

    if isinstance(error, BilledStoreError):
        _report(
            "Store Error",
            str(error),
            "No entries were marked as billed; check BILLED_STORE_PATH",
        )
        return EXIT_STORE

    if isinstance(error, (click.Abort, KeyboardInterrupt)):
        click.echo(format_warning("\nOperation cancelled by user"), err=True)
        return EXIT_ABORTED

    _report("Unexpected Error", f"{type(error).__name__}: {error}")
    if debug:
        click.echo("\nFull stack trace:", err=True)
        click.echo(
            "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            err=True,
        )
    else:
        click.echo(format_warning("Run with --debug for the full stack trace"), err=True)
    return EXIT_UNEXPECTED


def with_error_handling(debug: bool = False):
    """
    Context manager that turns exceptions into an error report and exit code.

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                ...
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if isinstance(exc_val, KeyboardInterrupt) or (
                isinstance(exc_val, Exception)
                and not isinstance(
                    exc_val, (click.ClickException, click.exceptions.Exit)
                )
            ):
                sys.exit(handle_cli_error(exc_val, self.show_debug))
            return False

    return ErrorHandler(debug)
