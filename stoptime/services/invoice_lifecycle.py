"""Invoice lifecycle operations.

The only stored lifecycle state is the paid flag. Paid is terminal: an
invoice is never marked unpaid again, and marking a paid invoice again
changes nothing.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from stoptime.clock import Clock, SystemClock
from stoptime.errors import InvalidReferenceError
from stoptime.models.invoice import Invoice
from stoptime.storage.records import InvoiceRecord
from stoptime.storage.repository import BillingRepository, to_invoice
from stoptime.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)


def _require_invoice(repository: BillingRepository, number: int) -> InvoiceRecord:
    record = repository.get_invoice_by_number(number)
    if record is None:
        raise InvalidReferenceError(
            f"Invoice {number} does not exist", fields={"number": "does not exist"}
        )
    return record


def get_invoice(session: Session, number: int) -> Invoice:
    """Load an invoice with its tasks, customer and company revision."""
    return to_invoice(_require_invoice(BillingRepository(session), number))


def list_invoices(session: Session, customer_id: Optional[int] = None) -> List[Invoice]:
    """All invoices in creation order, optionally of one customer."""
    return [to_invoice(r) for r in BillingRepository(session).list_invoices(customer_id)]


def mark_invoice_paid(
    session: Session, number: int, clock: Optional[Clock] = None
) -> Invoice:
    """Mark an invoice as paid.

    Args:
        session: Open database session (the caller commits)
        number: Invoice number
        clock: Source of the modification time

    Returns:
        The paid invoice

    Raises:
        InvalidReferenceError: If no invoice has this number
    """
    clock = clock or SystemClock()
    record = _require_invoice(BillingRepository(session), number)

    with LogContext(invoice_number=number):
        if record.paid:
            logger.debug("Invoice already paid")
        else:
            record.paid = True
            record.updated_at = clock.now()
            session.flush()
            logger.info(f"Invoice {number} marked as paid")

    return to_invoice(record)
