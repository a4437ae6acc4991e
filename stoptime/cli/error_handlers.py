"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from stoptime.cli.utils.formatters import format_error, format_fields, format_warning
from stoptime.errors import (
    BillingError,
    BillingValidationError,
    ConcurrencyConflict,
    ImmutabilityViolation,
    InvalidReferenceError,
)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""


class UsageError(CLIError):
    """Malformed command line arguments."""


# Checked in order; subclasses first
_BILLING_ERRORS = (
    (BillingValidationError, "Validation Error", 3),
    (InvalidReferenceError, "Invalid Reference", 4),
    (ConcurrencyConflict, "Conflict", 5),
    (ImmutabilityViolation, "Not Allowed", 6),
    (BillingError, "Billing Error", 7),
)


def _echo_hint(hint: Optional[str]) -> None:
    if hint:
        click.echo(format_warning(f"Hint: {hint}"))


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Handle CLI errors with user-friendly messages.

    Billing errors are printed with their per-field messages and recovery
    hint.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1-8 for known error types, 130 on abort, 255 otherwise)
    """
    if isinstance(error, ConfigurationError):
        click.echo(format_error(f"Configuration Error: {error.message}"))
        _echo_hint(error.recovery_hint)
        return 1

    if isinstance(error, UsageError):
        click.echo(format_error(f"Usage Error: {error.message}"))
        _echo_hint(error.recovery_hint)
        return 2

    if isinstance(error, ValidationError):
        error = BillingValidationError.from_pydantic(error)

    for error_class, title, exit_code in _BILLING_ERRORS:
        if isinstance(error, error_class):
            click.echo(format_error(f"{title}: {error.message}"))
            for line in format_fields(error.fields):
                click.echo(line)
            _echo_hint(error.recovery_hint)
            return exit_code

    if isinstance(error, SQLAlchemyError):
        click.echo(format_error(f"Database Error: {type(error).__name__}"))
        click.echo(format_warning("Hint: Check DATABASE_URL or run 'stoptime init-db'"))
        return 8

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130  # Standard exit code for SIGINT

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))

    if debug:
        click.echo("\nFull stack trace:")
        click.echo(traceback.format_exc())
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
        @click.pass_context
        def pay(ctx, number):
            with with_error_handling(ctx.obj["debug"]):
                ...
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and not isinstance(exc_val, click.exceptions.Exit):
                exit_code = handle_cli_error(exc_val, self.show_debug)
                sys.exit(exit_code)
            return False  # Don't suppress exceptions

    return ErrorHandler(debug)
