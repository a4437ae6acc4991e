"""Validation of an invoice selection against the stored ledger.

Every selected id must exist, belong to the invoiced customer and refer to
unbilled work. Problems are collected in a ValidationReport so that all of
them can be reported at once, before anything is written.
"""

from typing import Mapping, Optional

from stoptime.models.customer import Customer
from stoptime.models.invoice import InvoiceSelection
from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry
from stoptime.validators.validation_report import ValidationReport


class InvoiceSelectionValidator:
    """Checks an InvoiceSelection for broken or stale references.

    The caller loads the referenced records; the validator only inspects
    them. ``tasks`` must contain the selected fixed-cost tasks as well as
    the owners of the selected time entries.

    Example:
        >>> validator = InvoiceSelectionValidator()
        >>> report = validator.validate(selection, customer, entries, tasks)
        >>> if not report.is_valid():
        ...     raise InvalidReferenceError.from_report(report)
    """

    def validate(
        self,
        selection: InvoiceSelection,
        customer: Optional[Customer],
        time_entries: Mapping[int, TimeEntry],
        tasks: Mapping[int, Task],
    ) -> ValidationReport:
        """Validate a selection.

        Args:
            selection: The requested invoice contents
            customer: The invoiced customer, None when it does not exist
            time_entries: Loaded time entries by id
            tasks: Loaded tasks by id

        Returns:
            ValidationReport; errors make the selection unusable, warnings
            mark ids that are skipped
        """
        report = ValidationReport()

        if customer is None:
            report.add_error(
                "customer_id", "Customer does not exist", selection.customer_id
            )
            return report

        context = {"customer_id": customer.id}

        for entry_id in selection.time_entry_ids:
            self._validate_time_entry(
                entry_id, customer, time_entries, tasks, report, context
            )

        for task_id in selection.task_ids:
            self._validate_task(task_id, customer, tasks, report, context)

        skipped = {issue.value for issue in report.get_warnings()}
        if (
            report.is_valid()
            and not selection.time_entry_ids
            and skipped.issuperset(selection.task_ids)
        ):
            report.add_error(
                "task_ids", "Nothing billable selected", selection.task_ids, context
            )

        return report

    def _validate_time_entry(
        self,
        entry_id: int,
        customer: Customer,
        time_entries: Mapping[int, TimeEntry],
        tasks: Mapping[int, Task],
        report: ValidationReport,
        context: dict,
    ) -> None:
        entry = time_entries.get(entry_id)
        if entry is None:
            report.add_error(
                "time_entry_ids", "Time entry does not exist", entry_id, context
            )
            return

        task = tasks.get(entry.task_id)
        if task is None or task.customer_id != customer.id:
            report.add_error(
                "time_entry_ids",
                "Time entry does not belong to the customer",
                entry_id,
                context,
            )
            return

        if task.is_billed:
            report.add_error(
                "time_entry_ids", "Time entry is already billed", entry_id, context
            )
        elif task.is_fixed_cost:
            report.add_error(
                "time_entry_ids",
                "Time entry belongs to a fixed-cost task; select the task instead",
                entry_id,
                context,
            )
        elif not entry.bill:
            report.add_info(
                "time_entry_ids",
                "Time entry is marked as not billable but was selected",
                entry_id,
                context,
            )

    def _validate_task(
        self,
        task_id: int,
        customer: Customer,
        tasks: Mapping[int, Task],
        report: ValidationReport,
        context: dict,
    ) -> None:
        task = tasks.get(task_id)
        if task is None:
            report.add_error("task_ids", "Task does not exist", task_id, context)
        elif task.customer_id != customer.id:
            report.add_error(
                "task_ids", "Task does not belong to the customer", task_id, context
            )
        elif task.is_billed:
            report.add_error("task_ids", "Task is already billed", task_id, context)
        elif not task.is_fixed_cost:
            report.add_warning(
                "task_ids",
                "Task is not fixed-cost; select its time entries instead",
                task_id,
                context,
            )
