"""Task ledger: customers, tasks and registered time.

All functions take an open SQLAlchemy session and leave committing to the
caller (usually ``session_scope``). Input is validated with the domain
models; pydantic errors are re-raised as BillingValidationError so that a
caller can re-prompt per field.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from stoptime.calculators.task_calculator import billable_time_entries, summarize_task
from stoptime.calculators.time_utils import combine_date_time, normalize_entry_span
from stoptime.clock import Clock, SystemClock
from stoptime.config.settings import StopTimeConfig, get_config
from stoptime.errors import BillingValidationError, InvalidReferenceError
from stoptime.models.customer import Customer
from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry
from stoptime.storage.records import CustomerRecord, TaskRecord, TimeEntryRecord
from stoptime.storage.repository import (
    BillingRepository,
    to_customer,
    to_task,
    to_time_entry,
)

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = (
    "name",
    "short_name",
    "address_street",
    "address_postal_code",
    "address_city",
    "email",
    "phone",
    "financial_contact",
    "hourly_rate",
    "time_specification",
)
TASK_FIELDS = ("name", "fixed_cost", "hourly_rate", "vat_rate", "invoice_comment")
TIME_ENTRY_FIELDS = ("date", "start", "end", "comment", "bill")


@dataclass
class TaskCandidate:
    """Unbilled work of one task, as offered for invoicing.

    Attributes:
        task: The unbilled task
        entries: Billable entries (hourly-rate tasks only)
        hours: Registered hours
        amount: Amount the task would bill if selected completely
    """

    task: Task
    entries: List[TimeEntry] = field(default_factory=list)
    hours: Decimal = Decimal("0.00")
    amount: Decimal = Decimal("0.00")


@dataclass
class InvoiceCandidates:
    """Everything of a customer that can be put on a new invoice."""

    customer: Customer
    hourly: List[TaskCandidate] = field(default_factory=list)
    fixed_cost: List[TaskCandidate] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.hourly and not self.fixed_cost


@dataclass
class TimelineRow:
    """A registered time entry with the task and customer it belongs to."""

    entry: TimeEntry
    task: Task
    customer: Customer
    invoice_number: Optional[int] = None


def _validate(model, data: Dict[str, Any]):
    try:
        return model(**data)
    except ValidationError as e:
        raise BillingValidationError.from_pydantic(e) from e


def _check_fields(changes: Dict[str, Any], allowed: Tuple[str, ...]) -> None:
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise BillingValidationError(
            f"Unknown field(s): {', '.join(unknown)}",
            fields={name: "unknown field" for name in unknown},
        )


def _is_set(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def _require_customer(repository: BillingRepository, customer_id: int) -> CustomerRecord:
    record = repository.get_customer(customer_id)
    if record is None:
        raise InvalidReferenceError(
            f"Customer {customer_id} does not exist",
            fields={"customer_id": "does not exist"},
        )
    return record


def _require_task(repository: BillingRepository, task_id: int) -> TaskRecord:
    record = repository.get_task(task_id)
    if record is None:
        raise InvalidReferenceError(
            f"Task {task_id} does not exist", fields={"task_id": "does not exist"}
        )
    return record


def _require_time_entry(repository: BillingRepository, entry_id: int) -> TimeEntryRecord:
    record = repository.get_time_entry(entry_id)
    if record is None:
        raise InvalidReferenceError(
            f"Time entry {entry_id} does not exist",
            fields={"time_entry_id": "does not exist"},
        )
    return record


def _require_unbilled(record: TaskRecord, action: str) -> None:
    if record.invoice_id is not None:
        raise InvalidReferenceError(
            f"Task {record.id} is billed; cannot {action}",
            fields={"task_id": "task is already billed"},
            recovery_hint="Register the work on an unbilled task",
        )


# Customers


def create_customer(
    session: Session, config: Optional[StopTimeConfig] = None, **fields: Any
) -> Customer:
    """Create a customer.

    The hourly rate defaults to the configured ``default_hourly_rate``.

    Raises:
        BillingValidationError: If a field is unknown or invalid
    """
    config = config or get_config()
    _check_fields(fields, CUSTOMER_FIELDS)
    if not _is_set(fields.get("hourly_rate")):
        fields["hourly_rate"] = config.default_hourly_rate

    customer = _validate(Customer, fields)
    record = CustomerRecord(**customer.model_dump(exclude={"id", "created_at"}))
    repository = BillingRepository(session)
    repository.add(record)
    repository.flush()
    logger.info(f"Created customer {record.id} ({record.name})")
    return to_customer(record)


def update_customer(session: Session, customer_id: int, **changes: Any) -> Customer:
    """Change fields of a customer."""
    _check_fields(changes, CUSTOMER_FIELDS)
    repository = BillingRepository(session)
    record = _require_customer(repository, customer_id)

    data = to_customer(record).model_dump()
    data.update(changes)
    customer = _validate(Customer, data)

    for name in changes:
        setattr(record, name, getattr(customer, name))
    repository.flush()
    logger.info(f"Updated customer {customer_id}: {', '.join(sorted(changes))}")
    return to_customer(record)


def delete_customer(session: Session, customer_id: int) -> None:
    """Delete a customer that has no tasks and no invoices.

    Raises:
        BillingValidationError: If tasks or invoices still reference it
    """
    repository = BillingRepository(session)
    record = _require_customer(repository, customer_id)

    task_count = repository.count_tasks(customer_id)
    invoice_count = repository.count_invoices(customer_id)
    if task_count or invoice_count:
        raise BillingValidationError(
            f"Customer {customer_id} has {task_count} task(s) and "
            f"{invoice_count} invoice(s) and cannot be deleted",
            fields={"customer_id": "customer is still referenced"},
        )

    session.delete(record)
    repository.flush()
    logger.info(f"Deleted customer {customer_id}")


# Tasks


def create_task(
    session: Session,
    customer_id: int,
    name: str,
    fixed_cost: Any = None,
    hourly_rate: Any = None,
    vat_rate: Any = None,
    config: Optional[StopTimeConfig] = None,
) -> Task:
    """Create an unbilled task for a customer.

    Exactly one of ``fixed_cost`` and ``hourly_rate`` must be given. The VAT
    rate defaults to the configured ``default_vat_rate``.

    Raises:
        InvalidReferenceError: If the customer does not exist
        BillingValidationError: If both or neither billing modes are given,
            or a value is invalid
    """
    config = config or get_config()
    repository = BillingRepository(session)
    _require_customer(repository, customer_id)

    if _is_set(fixed_cost) == _is_set(hourly_rate):
        message = "Specify either a fixed cost or an hourly rate, not both or neither"
        raise BillingValidationError(
            message, fields={"fixed_cost": message, "hourly_rate": message}
        )

    task = _validate(
        Task,
        {
            "customer_id": customer_id,
            "name": name,
            "fixed_cost": fixed_cost,
            "hourly_rate": hourly_rate,
            "vat_rate": vat_rate if _is_set(vat_rate) else config.default_vat_rate,
        },
    )
    record = TaskRecord(
        customer_id=customer_id,
        name=task.name,
        fixed_cost=task.fixed_cost,
        hourly_rate=task.hourly_rate,
        vat_rate=task.vat_rate,
    )
    repository.add(record)
    repository.flush()
    logger.info(f"Created {task.billing_mode} task {record.id} for customer {customer_id}")
    return to_task(record)


def update_task(
    session: Session, task_id: int, **changes: Any
) -> Tuple[Task, List[str]]:
    """Change fields of a task.

    Billed tasks accept administrative corrections, but every such edit is
    reported in the returned warnings.

    Returns:
        Tuple of (updated task, warnings)
    """
    _check_fields(changes, TASK_FIELDS)
    repository = BillingRepository(session)
    record = _require_task(repository, task_id)

    data = to_task(record).model_dump(exclude={"time_entries"})
    data.update(changes)
    task = _validate(Task, data)

    warnings = []
    if record.invoice_id is not None:
        warning = (
            f"Task {task_id} is billed on invoice {record.invoice.number}; "
            "the change alters that invoice"
        )
        logger.warning(warning)
        warnings.append(warning)

    for name in changes:
        setattr(record, name, getattr(task, name))
    repository.flush()
    return to_task(record), warnings


def delete_task(session: Session, task_id: int) -> None:
    """Delete an unbilled task together with its time entries."""
    repository = BillingRepository(session)
    record = _require_task(repository, task_id)
    _require_unbilled(record, "delete it")

    for entry in list(record.time_entries):
        session.delete(entry)
    session.delete(record)
    repository.flush()
    logger.info(f"Deleted task {task_id}")


def unbilled_tasks(session: Session, customer_id: int) -> List[Task]:
    """Unbilled tasks of a customer, oldest first."""
    return [to_task(r) for r in BillingRepository(session).unbilled_tasks(customer_id)]


def invoice_candidates(session: Session, customer_id: int) -> InvoiceCandidates:
    """Collect the unbilled work of a customer that can be invoiced.

    Hourly-rate tasks are offered with their billable entries; fixed-cost
    tasks are offered whole, with their registered hours for reference.
    """
    repository = BillingRepository(session)
    customer = to_customer(_require_customer(repository, customer_id))
    candidates = InvoiceCandidates(customer=customer)

    for task in unbilled_tasks(session, customer_id):
        summary = summarize_task(task)
        if task.is_fixed_cost:
            candidates.fixed_cost.append(
                TaskCandidate(task=task, hours=summary.hours, amount=summary.amount)
            )
            continue

        entries = billable_time_entries(task)
        if entries:
            billable = summarize_task(task.model_copy(update={"time_entries": entries}))
            candidates.hourly.append(
                TaskCandidate(
                    task=task,
                    entries=entries,
                    hours=billable.hours,
                    amount=billable.amount,
                )
            )

    return candidates


# Time entries


def _entry_span(
    date: dt.date, start: dt.time, end: dt.time, resolution_minutes: int
) -> Tuple[dt.datetime, dt.datetime]:
    return normalize_entry_span(
        combine_date_time(date, start), combine_date_time(date, end), resolution_minutes
    )


def register_time_entry(
    session: Session,
    task_id: int,
    start: dt.time,
    end: dt.time,
    date: Optional[dt.date] = None,
    comment: Optional[str] = None,
    bill: bool = True,
    clock: Optional[Clock] = None,
    config: Optional[StopTimeConfig] = None,
) -> TimeEntry:
    """Register time on an unbilled task.

    Start and end are rounded to the configured resolution; an end at or
    before the start is taken to be on the next day.

    Args:
        session: Open database session
        task_id: Task to register time on
        start: Wall-clock start time
        end: Wall-clock end time
        date: Date of the work (defaults to today)
        comment: Description of the work
        bill: Whether the entry is meant to be billed

    Raises:
        InvalidReferenceError: If the task does not exist or is billed
        BillingValidationError: If the rounded entry has no duration
    """
    clock = clock or SystemClock()
    config = config or get_config()
    repository = BillingRepository(session)
    record = _require_unbilled_task(repository, task_id)

    date = date or clock.today()
    start_at, end_at = _entry_span(date, start, end, config.time_resolution_minutes)
    entry = _validate(
        TimeEntry,
        {
            "task_id": task_id,
            "date": date,
            "start": start_at,
            "end": end_at,
            "comment": comment,
            "bill": bill,
        },
    )

    entry_record = TimeEntryRecord(**entry.model_dump(exclude={"id"}))
    repository.add(entry_record)
    record.updated_at = clock.now()
    repository.flush()
    logger.debug(
        f"Registered {entry.hours_total}h on task {task_id} ({start_at} - {end_at})"
    )
    return to_time_entry(entry_record)


def _require_unbilled_task(repository: BillingRepository, task_id: int) -> TaskRecord:
    record = _require_task(repository, task_id)
    _require_unbilled(record, "register time on it")
    return record


def update_time_entry(
    session: Session,
    entry_id: int,
    start: Optional[dt.time] = None,
    end: Optional[dt.time] = None,
    config: Optional[StopTimeConfig] = None,
    **changes: Any,
) -> TimeEntry:
    """Change a time entry of an unbilled task.

    New start or end times are rounded and corrected like on registration,
    relative to the (possibly changed) entry date.
    """
    config = config or get_config()
    _check_fields(changes, ("date", "comment", "bill"))
    repository = BillingRepository(session)
    record = _require_time_entry(repository, entry_id)
    _require_unbilled(record.task, "change its time entries")

    data = to_time_entry(record).model_dump()
    data.update(changes)
    if start is not None or end is not None or "date" in changes:
        data["start"], data["end"] = _entry_span(
            data["date"],
            start or record.start.time(),
            end or record.end.time(),
            config.time_resolution_minutes,
        )
    entry = _validate(TimeEntry, data)

    for name in TIME_ENTRY_FIELDS:
        setattr(record, name, getattr(entry, name))
    repository.flush()
    return to_time_entry(record)


def delete_time_entry(session: Session, entry_id: int) -> None:
    """Delete a time entry of an unbilled task."""
    repository = BillingRepository(session)
    record = _require_time_entry(repository, entry_id)
    _require_unbilled(record.task, "delete its time entries")
    session.delete(record)
    repository.flush()
    logger.info(f"Deleted time entry {entry_id}")


def timeline(session: Session, limit: Optional[int] = None) -> List[TimelineRow]:
    """Registered time of all customers, most recent first.

    Args:
        session: Open database session
        limit: Maximum number of entries to return

    Returns:
        One row per time entry, with the invoice number once billed
    """
    rows = []
    for record in BillingRepository(session).timeline(limit):
        task = record.task
        rows.append(
            TimelineRow(
                entry=to_time_entry(record),
                task=to_task(task),
                customer=to_customer(task.customer),
                invoice_number=task.invoice.number if task.invoice is not None else None,
            )
        )
    return rows
