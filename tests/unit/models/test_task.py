"""Unit tests for the Task model."""

import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry


class TestTaskBillingMode:
    """Test the fixed-cost / hourly-rate exclusivity."""

    def test_hourly_rate_task(self):
        """Test a task with only an hourly rate."""
        task = Task(customer_id=1, name="Website", hourly_rate="50")

        assert task.hourly_rate == Decimal("50")
        assert task.billing_mode == "hourly_rate"
        assert not task.is_fixed_cost

    def test_fixed_cost_task(self):
        """Test a task with only a fixed cost."""
        task = Task(customer_id=1, name="Logo", fixed_cost=Decimal("500"))

        assert task.billing_mode == "fixed_cost"
        assert task.is_fixed_cost

    def test_both_modes_rejected(self):
        """Test that setting both fixed cost and hourly rate fails."""
        with pytest.raises(ValidationError) as exc_info:
            Task(customer_id=1, name="X", fixed_cost=100, hourly_rate=50)

        assert "exactly one of fixed_cost and hourly_rate" in str(exc_info.value)

    def test_neither_mode_rejected(self):
        """Test that a task needs one billing mode."""
        with pytest.raises(ValidationError):
            Task(customer_id=1, name="X")

    def test_blank_string_counts_as_unset(self):
        """Test that blank form input does not count as a value."""
        task = Task(customer_id=1, name="X", fixed_cost="  ", hourly_rate="45.5")

        assert task.fixed_cost is None
        assert task.hourly_rate == Decimal("45.5")

    def test_invalid_number_rejected(self):
        """Test that non-numeric rates are rejected."""
        with pytest.raises(ValidationError):
            Task(customer_id=1, name="X", hourly_rate="fifty")

    @pytest.mark.parametrize("vat_rate", ["-1", "100.01"])
    def test_vat_rate_range(self, vat_rate):
        """Test that the VAT rate is a percentage."""
        with pytest.raises(ValidationError):
            Task(customer_id=1, name="X", hourly_rate=50, vat_rate=vat_rate)


class TestTaskProperties:
    """Test derived task properties."""

    def test_name_is_stripped(self):
        """Test that surrounding whitespace is removed from the name."""
        task = Task(customer_id=1, name="  Website  ", hourly_rate=50)
        assert task.name == "Website"

    def test_whitespace_name_rejected(self):
        """Test that a whitespace-only name fails."""
        with pytest.raises(ValidationError):
            Task(customer_id=1, name="   ", hourly_rate=50)

    def test_is_billed(self):
        """Test that a task with an invoice id is billed."""
        assert Task(customer_id=1, name="X", hourly_rate=1, invoice_id=3).is_billed
        assert not Task(customer_id=1, name="X", hourly_rate=1).is_billed

    def test_display_name_prefers_invoice_comment(self):
        """Test that the invoice comment is shown once set."""
        task = Task(
            customer_id=1, name="Website", hourly_rate=1, invoice_comment="Redesign"
        )
        assert task.display_name == "Redesign"

    def test_display_name_falls_back_to_name(self):
        """Test that a blank invoice comment falls back to the name."""
        task = Task(customer_id=1, name="Website", hourly_rate=1, invoice_comment=" ")
        assert task.display_name == "Website"

    def test_time_entries_are_models(self):
        """Test that nested time entries are validated."""
        task = Task(
            customer_id=1,
            name="Website",
            hourly_rate=50,
            time_entries=[
                {
                    "date": dt.date(2024, 1, 8),
                    "start": dt.datetime(2024, 1, 8, 9, 0),
                    "end": dt.datetime(2024, 1, 8, 10, 0),
                }
            ],
        )
        assert isinstance(task.time_entries[0], TimeEntry)
