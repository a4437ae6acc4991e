"""Validation layer for invoice selections and reporting of issues."""

from stoptime.validators.selection_validator import InvoiceSelectionValidator
from stoptime.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "InvoiceSelectionValidator",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
]
