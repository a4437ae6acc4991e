"""Invoice builder.

Turns an InvoiceSelection into a stored invoice in a single transaction:

1. Validate every selected id (nothing is written on failure)
2. Number the invoice and pin the current company revision
3. Split each hourly-rate task: a billed copy receives the selected entries,
   the original keeps the rest
4. Attach selected fixed-cost tasks as a whole

A concurrent writer can take the computed number first. The unique
constraint on the invoice number turns that into a ConcurrencyConflict and
the whole transaction is retried with a freshly computed number.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from stoptime.clock import Clock, SystemClock
from stoptime.config.settings import StopTimeConfig, get_config
from stoptime.errors import ConcurrencyConflict, InvalidReferenceError
from stoptime.models.invoice import Invoice, InvoiceSelection
from stoptime.services.company_profile import latest_company_info_record
from stoptime.services.invoice_numbering import next_invoice_number
from stoptime.services.retry_handler import RetryExhaustedException, RetryHandler
from stoptime.storage.base import session_scope
from stoptime.storage.records import InvoiceRecord, TaskRecord, TimeEntryRecord
from stoptime.storage.repository import (
    BillingRepository,
    to_customer,
    to_invoice,
    to_task,
    to_time_entry,
)
from stoptime.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    log_function_call,
)
from stoptime.validators.selection_validator import InvoiceSelectionValidator

logger = logging.getLogger(__name__)


class InvoiceBuilder:
    """Builds invoices from selections of unbilled work.

    Example:
        >>> builder = InvoiceBuilder(session_factory, clock=FixedClock(now))
        >>> invoice = builder.build(
        ...     InvoiceSelection(customer_id=1, time_entry_ids=[10, 11])
        ... )
        >>> invoice.number
        202401
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Optional[Clock] = None,
        config: Optional[StopTimeConfig] = None,
        retry_handler: Optional[RetryHandler] = None,
    ):
        """
        Initialize the builder.

        Args:
            session_factory: Factory for the sessions each attempt runs in
            clock: Source of the invoice date (defaults to the system clock)
            config: Settings for default VAT and retry behaviour
            retry_handler: Retry policy for number conflicts
        """
        self.session_factory = session_factory
        self.clock = clock or SystemClock()
        self.config = config or get_config()
        self.retry_handler = retry_handler or RetryHandler(
            max_retries=self.config.max_retries, base_delay=self.config.retry_delay
        )
        self.validator = InvoiceSelectionValidator()

    @log_function_call(level="INFO")
    def build(self, selection: InvoiceSelection) -> Invoice:
        """Create an invoice for the selected work.

        Args:
            selection: Customer, time entries, fixed-cost tasks and comments

        Returns:
            The created invoice with its billed tasks

        Raises:
            InvalidReferenceError: If any selected id is unknown, belongs to
                another customer or is already billed
            ConcurrencyConflict: If no free invoice number could be claimed
        """
        # One correlation id across all retries of this build
        with LogContext(
            correlation_id=generate_correlation_id(),
            customer_id=selection.customer_id,
        ):
            try:
                return self.retry_handler.execute_with_retry(self._attempt, selection)
            except RetryExhaustedException as e:
                raise ConcurrencyConflict(
                    "Another invoice was created at the same time",
                    fields={"number": "invoice number already taken"},
                    recovery_hint="Please try again",
                ) from e

    def _attempt(self, selection: InvoiceSelection) -> Invoice:
        with session_scope(self.session_factory) as session:
            return self._build_in_session(session, selection)

    def _build_in_session(self, session: Session, selection: InvoiceSelection) -> Invoice:
        repository = BillingRepository(session)

        entries = repository.time_entries_by_ids(selection.time_entry_ids)
        owner_ids = {entry.task_id for entry in entries.values()}
        tasks = repository.tasks_by_ids(owner_ids | set(selection.task_ids))
        customer = repository.get_customer(selection.customer_id)

        report = self.validator.validate(
            selection,
            to_customer(customer) if customer is not None else None,
            {entry_id: to_time_entry(r) for entry_id, r in entries.items()},
            {task_id: to_task(r) for task_id, r in tasks.items()},
        )
        if not report.is_valid():
            logger.info(f"Rejected invoice selection: {report.summary()}")
            logger.debug(report.format())
            raise InvalidReferenceError.from_report(report)
        for issue in report.get_warnings():
            logger.warning(str(issue))

        invoice = self._create_invoice_shell(session, repository, customer.id)
        invoice.customer = customer
        invoice.include_specification = bool(customer.time_specification)

        with LogContext(invoice_number=invoice.number):
            self._bill_time_entries(
                repository, invoice, selection, entries, selection.time_entry_ids
            )
            self._bill_fixed_cost_tasks(invoice, selection, tasks)

            repository.flush()
            session.refresh(invoice)
            logger.info(
                f"Created invoice {invoice.number} with {len(invoice.tasks)} task(s)"
            )
            return to_invoice(invoice)

    def _create_invoice_shell(
        self, session: Session, repository: BillingRepository, customer_id: int
    ) -> InvoiceRecord:
        latest = repository.latest_invoice()
        number = next_invoice_number(
            latest.number if latest is not None else None, self.clock.today()
        )
        company_info = latest_company_info_record(session)
        now = self.clock.now()

        invoice = InvoiceRecord(
            number=number,
            customer_id=customer_id,
            company_info=company_info,
            created_at=now,
            updated_at=now,
        )
        repository.add(invoice)
        try:
            repository.flush()
        except IntegrityError as e:
            raise ConcurrencyConflict(
                f"Invoice number {number} is already taken",
                fields={"number": "invoice number already taken"},
            ) from e
        return invoice

    def _bill_time_entries(
        self,
        repository: BillingRepository,
        invoice: InvoiceRecord,
        selection: InvoiceSelection,
        entries: Dict[int, TimeEntryRecord],
        entry_ids: List[int],
    ) -> None:
        by_task: "OrderedDict[int, List[TimeEntryRecord]]" = OrderedDict()
        for entry_id in entry_ids:
            entry = entries[entry_id]
            by_task.setdefault(entry.task_id, []).append(entry)

        for selected in by_task.values():
            original = selected[0].task
            billed_copy = TaskRecord(
                customer_id=original.customer_id,
                name=original.name,
                hourly_rate=original.hourly_rate,
                vat_rate=(
                    original.vat_rate
                    if original.vat_rate is not None
                    else self.config.default_vat_rate
                ),
                invoice_comment=selection.comment_for(to_task(original)),
                invoice=invoice,
                created_at=invoice.created_at,
                updated_at=invoice.created_at,
            )
            repository.add(billed_copy)
            for entry in selected:
                entry.task = billed_copy
            logger.debug(
                f"Split task {original.id}: {len(selected)} entr(y/ies) billed, "
                f"{len(original.time_entries)} left unbilled"
            )

    def _bill_fixed_cost_tasks(
        self,
        invoice: InvoiceRecord,
        selection: InvoiceSelection,
        tasks: Dict[int, TaskRecord],
    ) -> None:
        for task_id in selection.task_ids:
            task = tasks[task_id]
            if task.fixed_cost is None:
                continue
            task.invoice_comment = selection.comment_for(to_task(task))
            task.invoice = invoice
            task.updated_at = invoice.created_at
