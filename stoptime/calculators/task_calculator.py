"""Task ledger calculations.

This module implements the per-task billing rules:
- Which time entries are billable
- The billing period of a task
- The task summary (hours, rate, amount, VAT amount)

Fixed-cost tasks bill their fixed amount; registered hours are reported
for information only. Hourly-rate tasks bill hours times rate.
"""

import datetime as dt
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from stoptime.calculators.time_utils import ONE_HOUR, timedelta_to_hours
from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry

CENTS = Decimal("0.01")


@dataclass
class TaskSummary:
    """Billing summary of a single task.

    Attributes:
        hours: Registered hours, unrounded (informational for fixed-cost
            tasks)
        hourly_rate: Rate per hour, None for fixed-cost tasks
        amount: Amount billed for the task
        vat_amount: VAT over the amount at the task's VAT rate

    Example:
        >>> summary = TaskSummary(
        ...     hours=Decimal("5.00"),
        ...     hourly_rate=Decimal("50.00"),
        ...     amount=Decimal("250.00"),
        ...     vat_amount=Decimal("52.50"),
        ... )
        >>> summary.amount + summary.vat_amount
        Decimal('302.50')
    """

    hours: Decimal
    hourly_rate: Optional[Decimal]
    amount: Decimal
    vat_amount: Decimal


def to_cents(amount: Decimal) -> Decimal:
    """Quantize a monetary amount to cents, rounding halves up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def hourly_amount(duration: dt.timedelta, rate: Decimal) -> Decimal:
    """Unrounded amount for a duration at an hourly rate."""
    # Divide last so the product stays exact
    return Decimal(duration // dt.timedelta(microseconds=1)) * rate / Decimal(
        ONE_HOUR // dt.timedelta(microseconds=1)
    )


def billable_time_entries(task: Task) -> List[TimeEntry]:
    """Return the entries flagged for billing, ordered by start.

    Args:
        task: Task whose entries to filter

    Returns:
        Billable time entries sorted by start instant
    """
    return sorted((e for e in task.time_entries if e.bill), key=lambda e: e.start)


def task_duration(task: Task) -> dt.timedelta:
    """Total registered duration of all entries of a task."""
    return sum((entry.duration for entry in task.time_entries), dt.timedelta())


def task_bill_period(task: Task) -> Tuple[dt.datetime, dt.datetime]:
    """Return the billing period of a task.

    The period runs from the earliest start to the latest end of the
    billable entries. A task without billable entries gets the degenerate
    period ``(updated_at, updated_at)``.

    Args:
        task: Task to inspect

    Returns:
        Tuple of (period start, period end)

    Raises:
        ValueError: If the task has no billable entries and no updated_at
    """
    entries = billable_time_entries(task)
    if not entries:
        # Zero-length period at the last update
        if task.updated_at is None:
            raise ValueError(
                f"Task {task.id} has no billable entries and no updated_at"
            )
        return task.updated_at, task.updated_at

    return entries[0].start, max(entry.end for entry in entries)


def summarize_task(task: Task) -> TaskSummary:
    """Calculate the billing summary of a task.

    Args:
        task: Task with its time entries

    Returns:
        TaskSummary with hours, rate, amount and VAT amount

    Example:
        >>> task = Task(
        ...     customer_id=1,
        ...     name="Website",
        ...     hourly_rate=Decimal("50.00"),
        ...     vat_rate=Decimal("21"),
        ...     time_entries=[
        ...         TimeEntry(
        ...             date=dt.date(2024, 1, 8),
        ...             start=dt.datetime(2024, 1, 8, 9, 0),
        ...             end=dt.datetime(2024, 1, 8, 11, 0),
        ...         )
        ...     ],
        ... )
        >>> summarize_task(task).amount
        Decimal('100.00')
    """
    duration = task_duration(task)
    hours = timedelta_to_hours(duration)

    if task.is_fixed_cost:
        rate = None
        amount = to_cents(task.fixed_cost)
    else:
        rate = task.hourly_rate
        amount = to_cents(hourly_amount(duration, rate))

    vat_amount = to_cents(amount * task.vat_rate / Decimal("100"))

    return TaskSummary(
        hours=hours, hourly_rate=rate, amount=amount, vat_amount=vat_amount
    )
