"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
from pydantic import ValidationError

from fluxledger.cli.utils.formatters import format_error, format_warning
from fluxledger.exceptions import (
    CapabilityError,
    EmptySelectionError,
    RecordNotFoundError,
    StorageError,
)
from fluxledger.models.base import first_error


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""


class DataValidationError(CLIError):
    """Error related to invalid input data."""


def _report(title: str, message: str, hint: Optional[str] = None) -> None:
    click.echo(format_error(f"{title}: {message}"))
    if hint:
        click.echo(format_warning(f"Hint: {hint}"))


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Print a user-friendly message for an error and pick the exit code.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1-7 for known error types, 130 on abort, 255 otherwise)
    """
    if isinstance(error, ConfigurationError):
        _report("Configuration Error", error.message, error.recovery_hint)
        return 1

    if isinstance(error, DataValidationError):
        _report("Data Validation Error", error.message, error.recovery_hint)
        return 3

    if isinstance(error, ValidationError):
        _report("Data Validation Error", first_error(error))
        return 3

    if isinstance(error, RecordNotFoundError):
        _report("Not Found", str(error), "Run list-entries to see the available ids")
        return 7

    if isinstance(error, StorageError):
        _report(
            "Storage Error",
            str(error),
            "Check FLUXLEDGER_DATA_FILE and the permissions of its directory",
        )
        return 2

    if isinstance(error, EmptySelectionError):
        _report("Empty Selection", str(error), "Pass at least one --entry-id")
        return 5

    if isinstance(error, CapabilityError):
        _report("Not Allowed", str(error), "Upgrade the subscription to continue")
        return 6

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))
    if debug:
        click.echo("\nFull stack trace:")
        click.echo(
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))
    return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                ...
    """

    class ErrorHandler:
        """Context manager for error handling."""

        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is None or isinstance(exc_val, click.exceptions.Exit):
                return False
            if not isinstance(exc_val, Exception):
                return False
            sys.exit(handle_cli_error(exc_val, self.show_debug))

    return ErrorHandler(debug)
