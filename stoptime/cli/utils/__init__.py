"""CLI utility functions."""

from stoptime.cli.utils.formatters import (
    format_error,
    format_fields,
    format_hours,
    format_info,
    format_money,
    format_period,
    format_rate,
    format_success,
    format_table,
    format_warning,
)

__all__ = [
    "format_error",
    "format_fields",
    "format_hours",
    "format_info",
    "format_money",
    "format_period",
    "format_rate",
    "format_success",
    "format_table",
    "format_warning",
]
