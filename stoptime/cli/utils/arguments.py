"""Parsing of FIELD=VALUE command line arguments."""

from typing import Dict, Optional, Tuple

from stoptime.cli.error_handlers import UsageError


def parse_assignments(values: Tuple[str, ...]) -> Dict[str, Optional[str]]:
    """Parse ``FIELD=VALUE`` arguments; an empty value clears the field.

    Raises:
        UsageError: If a value has no ``=`` or no field name
    """
    changes: Dict[str, Optional[str]] = {}
    for value in values:
        name, sep, text = value.partition("=")
        if not sep or not name.strip():
            raise UsageError(
                f"Invalid assignment '{value}'",
                recovery_hint="Use FIELD=VALUE, e.g. email=billing@example.com",
            )
        changes[name.strip()] = text if text != "" else None
    return changes
