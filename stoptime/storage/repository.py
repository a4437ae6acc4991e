"""Query helpers over the billing records.

The repository wraps a SQLAlchemy session and offers the ordered and
filtered queries the services need. Records are converted into pydantic
domain models at this boundary with ``to_*`` helpers.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from stoptime.models.company_info import CompanyInfo
from stoptime.models.customer import Customer
from stoptime.models.invoice import Invoice
from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry
from stoptime.storage.records import (
    CompanyInfoRecord,
    CustomerRecord,
    InvoiceRecord,
    TaskRecord,
    TimeEntryRecord,
)

logger = logging.getLogger(__name__)


def to_customer(record: CustomerRecord) -> Customer:
    return Customer.model_validate(record)


def to_task(record: TaskRecord) -> Task:
    return Task.model_validate(record)


def to_time_entry(record: TimeEntryRecord) -> TimeEntry:
    return TimeEntry.model_validate(record)


def to_company_info(record: CompanyInfoRecord) -> CompanyInfo:
    return CompanyInfo.model_validate(record)


def to_invoice(record: InvoiceRecord) -> Invoice:
    return Invoice.model_validate(record)


class BillingRepository:
    """Queries over customers, tasks, time entries, invoices and company info.

    Example:
        >>> with session_scope(factory) as session:
        ...     repo = BillingRepository(session)
        ...     latest = repo.latest_invoice()
    """

    def __init__(self, session: Session):
        self.session = session

    def add(self, record) -> None:
        self.session.add(record)

    def flush(self) -> None:
        self.session.flush()

    # Customers

    def get_customer(self, customer_id: int) -> Optional[CustomerRecord]:
        return self.session.get(CustomerRecord, customer_id)

    def list_customers(self) -> List[CustomerRecord]:
        return self.session.query(CustomerRecord).order_by(CustomerRecord.name).all()

    # Tasks

    def get_task(self, task_id: int) -> Optional[TaskRecord]:
        return self.session.get(TaskRecord, task_id)

    def tasks_by_ids(self, task_ids: Iterable[int]) -> Dict[int, TaskRecord]:
        ids = list(task_ids)
        if not ids:
            return {}
        records = self.session.query(TaskRecord).filter(TaskRecord.id.in_(ids)).all()
        return {record.id: record for record in records}

    def unbilled_tasks(self, customer_id: int) -> List[TaskRecord]:
        return (
            self.session.query(TaskRecord)
            .filter(
                TaskRecord.customer_id == customer_id,
                TaskRecord.invoice_id.is_(None),
            )
            .order_by(TaskRecord.id)
            .all()
        )

    def count_tasks(self, customer_id: int) -> int:
        return (
            self.session.query(func.count(TaskRecord.id))
            .filter(TaskRecord.customer_id == customer_id)
            .scalar()
        )

    # Time entries

    def get_time_entry(self, entry_id: int) -> Optional[TimeEntryRecord]:
        return self.session.get(TimeEntryRecord, entry_id)

    def time_entries_by_ids(self, entry_ids: Iterable[int]) -> Dict[int, TimeEntryRecord]:
        ids = list(entry_ids)
        if not ids:
            return {}
        records = (
            self.session.query(TimeEntryRecord)
            .filter(TimeEntryRecord.id.in_(ids))
            .all()
        )
        return {record.id: record for record in records}

    def timeline(self, limit: Optional[int] = None) -> List[TimeEntryRecord]:
        """All time entries, most recent first."""
        query = self.session.query(TimeEntryRecord).order_by(
            TimeEntryRecord.start.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    # Invoices

    def get_invoice_by_number(self, number: int) -> Optional[InvoiceRecord]:
        return (
            self.session.query(InvoiceRecord)
            .filter(InvoiceRecord.number == number)
            .one_or_none()
        )

    def latest_invoice(self) -> Optional[InvoiceRecord]:
        """The most recently created invoice.

        Ordered by insertion (id) rather than by number: a sequence past 99
        gives a longer number (2024100), which would otherwise outrank the
        first invoices of the next year (202501).
        """
        return self.session.query(InvoiceRecord).order_by(InvoiceRecord.id.desc()).first()

    def list_invoices(self, customer_id: Optional[int] = None) -> List[InvoiceRecord]:
        query = self.session.query(InvoiceRecord)
        if customer_id is not None:
            query = query.filter(InvoiceRecord.customer_id == customer_id)
        return query.order_by(InvoiceRecord.id).all()

    def count_invoices(self, customer_id: int) -> int:
        return (
            self.session.query(func.count(InvoiceRecord.id))
            .filter(InvoiceRecord.customer_id == customer_id)
            .scalar()
        )

    # Company info

    def get_company_info(self, revision_id: int) -> Optional[CompanyInfoRecord]:
        return self.session.get(CompanyInfoRecord, revision_id)

    def latest_company_info(self) -> Optional[CompanyInfoRecord]:
        return (
            self.session.query(CompanyInfoRecord)
            .order_by(CompanyInfoRecord.id.desc())
            .first()
        )

    def company_revisions(self) -> List[CompanyInfoRecord]:
        return self.session.query(CompanyInfoRecord).order_by(CompanyInfoRecord.id).all()

    def count_invoices_for_company_info(self, revision_id: int) -> int:
        return (
            self.session.query(func.count(InvoiceRecord.id))
            .filter(InvoiceRecord.company_info_id == revision_id)
            .scalar()
        )
