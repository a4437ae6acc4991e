"""Unit tests for the billing error taxonomy."""

import pytest
from pydantic import ValidationError

from stoptime.errors import (
    BillingError,
    BillingValidationError,
    ConcurrencyConflict,
    ImmutabilityViolation,
    InvalidReferenceError,
)
from stoptime.models.invoice import InvoiceSelection
from stoptime.models.task import Task
from stoptime.validators.validation_report import ValidationReport


class TestBillingError:
    """Test the base error."""

    def test_attributes(self):
        """Test message, fields and hint are kept."""
        error = BillingError("Broken", fields={"name": "required"}, recovery_hint="Retry")

        assert str(error) == "Broken"
        assert error.fields == {"name": "required"}
        assert error.recovery_hint == "Retry"

    def test_defaults(self):
        """Test fields default to an empty mapping."""
        error = ConcurrencyConflict("taken")

        assert error.fields == {}
        assert error.recovery_hint is None

    @pytest.mark.parametrize(
        "cls",
        [
            BillingValidationError,
            InvalidReferenceError,
            ConcurrencyConflict,
            ImmutabilityViolation,
        ],
    )
    def test_hierarchy(self, cls):
        """Test all engine errors derive from BillingError."""
        assert issubclass(cls, BillingError)


class TestFromPydantic:
    """Test converting pydantic errors."""

    def test_field_errors(self):
        """Test each offending field is listed."""
        with pytest.raises(ValidationError) as exc_info:
            Task(customer_id=1, name=" ", hourly_rate="-1")

        error = BillingValidationError.from_pydantic(exc_info.value)

        assert error.message == "Invalid Task data"
        assert set(error.fields) == {"name", "hourly_rate"}

    def test_model_error(self):
        """Test model-level errors are reported under __model__."""
        with pytest.raises(ValidationError) as exc_info:
            InvoiceSelection(customer_id=1)

        error = BillingValidationError.from_pydantic(exc_info.value)

        assert list(error.fields) == ["__model__"]
        assert "select at least one" in error.fields["__model__"]


class TestFromReport:
    """Test converting a validation report."""

    def test_errors_grouped_per_field(self):
        """Test multiple errors on one field are joined."""
        report = ValidationReport()
        report.add_error("time_entry_ids", "Time entry does not exist", 7)
        report.add_error("time_entry_ids", "Time entry is already billed", 8)
        report.add_error("task_ids", "Task does not exist", 4)
        report.add_warning("task_ids", "Task is not fixed-cost", 5)

        error = InvalidReferenceError.from_report(report)

        assert error.fields == {
            "time_entry_ids": (
                "Time entry does not exist (7); Time entry is already billed (8)"
            ),
            "task_ids": "Task does not exist (4)",
        }
        assert error.message == "Invalid invoice selection: 3 error(s), 1 warning(s)"
        assert error.recovery_hint is not None
