"""Error taxonomy for the billing engine.

All engine errors derive from BillingError and carry a per-field mapping so
that a caller (CLI, web front end) can re-prompt for the offending input:

- BillingValidationError: malformed or mutually exclusive field values
- InvalidReferenceError: ids that do not belong to the customer or are billed
- ConcurrencyConflict: invoice number collision, recoverable by retrying
- ImmutabilityViolation: attempt to mutate a published company revision
"""

from typing import TYPE_CHECKING, Dict, Optional

from pydantic import ValidationError

if TYPE_CHECKING:
    from stoptime.validators.validation_report import ValidationReport


class BillingError(Exception):
    """Base exception for billing engine errors."""

    def __init__(
        self,
        message: str,
        fields: Optional[Dict[str, str]] = None,
        recovery_hint: Optional[str] = None,
    ):
        """
        Initialize billing error.

        Args:
            message: Error message to display
            fields: Mapping of field name to a message about that field
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.fields = dict(fields or {})
        self.recovery_hint = recovery_hint
        super().__init__(message)


class BillingValidationError(BillingError):
    """Malformed or mutually exclusive field combination."""

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> "BillingValidationError":
        """Convert a pydantic validation error into a per-field billing error.

        Model-level errors (raised by a model validator) have an empty
        location and are reported under the ``__model__`` key.

        Args:
            error: The pydantic validation error

        Returns:
            BillingValidationError with one entry per offending field
        """
        fields: Dict[str, str] = {}
        for item in error.errors():
            name = ".".join(str(part) for part in item["loc"]) or "__model__"
            fields.setdefault(name, item["msg"])
        return cls(f"Invalid {error.title} data", fields=fields)


class InvalidReferenceError(BillingError):
    """An id does not belong to the customer or refers to billed work."""

    @classmethod
    def from_report(cls, report: "ValidationReport") -> "InvalidReferenceError":
        """Build the error from the error-level issues of a validation report.

        Args:
            report: Report produced by the invoice selection validator

        Returns:
            InvalidReferenceError listing every offending field
        """
        fields: Dict[str, str] = {}
        for issue in report.get_errors():
            message = f"{issue.message} ({issue.value})"
            if issue.field in fields:
                fields[issue.field] = f"{fields[issue.field]}; {message}"
            else:
                fields[issue.field] = message
        return cls(
            f"Invalid invoice selection: {report.summary()}",
            fields=fields,
            recovery_hint="Reload the list of unbilled work and select again",
        )


class ConcurrencyConflict(BillingError):
    """Invoice number collided with a concurrently created invoice."""


class ImmutabilityViolation(BillingError):
    """A company revision referenced by an invoice cannot be changed."""
