"""Invoice lifecycle predicates.

Payment state is the only stored lifecycle field (``paid``). Whether an
unpaid invoice is past due is derived from its age on every read.
"""

import datetime as dt
from enum import Enum

from stoptime.models.invoice import Invoice

PAYMENT_TERM = dt.timedelta(days=30)
FINAL_TERM = dt.timedelta(days=60)


class InvoiceStatus(Enum):
    """Derived status of an invoice."""

    PAID = "paid"
    UNPAID = "unpaid"
    PAST_DUE = "past_due"
    WAY_PAST_DUE = "way_past_due"


def due_date(invoice: Invoice) -> dt.datetime:
    return invoice.created_at + PAYMENT_TERM


def is_past_due(invoice: Invoice, now: dt.datetime) -> bool:
    """Unpaid and older than the payment term."""
    return not invoice.paid and (now - invoice.created_at) > PAYMENT_TERM


def is_way_past_due(invoice: Invoice, now: dt.datetime) -> bool:
    """Past due and older than the final term."""
    return is_past_due(invoice, now) and (now - invoice.created_at) > FINAL_TERM


def invoice_status(invoice: Invoice, now: dt.datetime) -> InvoiceStatus:
    """Derive the status of an invoice at a given moment.

    Args:
        invoice: The invoice
        now: Current time (from the injected clock)

    Returns:
        InvoiceStatus
    """
    if invoice.paid:
        return InvoiceStatus.PAID
    if is_way_past_due(invoice, now):
        return InvoiceStatus.WAY_PAST_DUE
    if is_past_due(invoice, now):
        return InvoiceStatus.PAST_DUE
    return InvoiceStatus.UNPAID
