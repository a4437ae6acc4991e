"""Invoice totals and period calculations.

Invoice totals are never stored. Every figure below is recomputed from the
tasks attached to the invoice, so administrative corrections on a billed
task show up immediately:
- Invoice lines (one per billed task)
- Subtotal and VAT breakdown per rate
- Total amount (VAT is only charged when the pinned company revision has a
  VAT registration number)
- Invoice period
"""

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from stoptime.calculators.task_calculator import (
    summarize_task,
    task_bill_period,
    to_cents,
)
from stoptime.models.invoice import Invoice


@dataclass
class InvoiceLine:
    """A single line of an invoice, derived from one billed task.

    Attributes:
        task_id: Id of the billed task
        description: Task display name (invoice comment or name)
        hours: Registered hours
        hourly_rate: Rate per hour (None for fixed-cost tasks)
        amount: Line amount
        vat_rate: VAT percentage of the task
        vat_amount: VAT over the line amount
    """

    task_id: Optional[int]
    description: str
    hours: Decimal
    hourly_rate: Optional[Decimal]
    amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal


@dataclass
class InvoiceTotals:
    """Complete financial breakdown of an invoice.

    Attributes:
        lines: One line per billed task
        subtotal: Sum of line amounts
        vat_summary: Total VAT per VAT rate
        vat_total: Sum of all VAT (zero when VAT is not charged)
        total_amount: Amount due
        vat_charged: Whether the issuer charges VAT on this invoice
    """

    lines: List[InvoiceLine]
    subtotal: Decimal
    vat_summary: Dict[Decimal, Decimal] = field(default_factory=dict)
    vat_total: Decimal = Decimal("0.00")
    total_amount: Decimal = Decimal("0.00")
    vat_charged: bool = False


def invoice_lines(invoice: Invoice) -> List[InvoiceLine]:
    """Build the invoice lines from the attached tasks."""
    lines = []
    for task in invoice.tasks:
        summary = summarize_task(task)
        lines.append(
            InvoiceLine(
                task_id=task.id,
                description=task.display_name,
                hours=summary.hours,
                hourly_rate=summary.hourly_rate,
                amount=summary.amount,
                vat_rate=task.vat_rate,
                vat_amount=summary.vat_amount,
            )
        )
    return lines


def invoice_period(invoice: Invoice) -> Tuple[dt.datetime, dt.datetime]:
    """Return the period covered by an invoice.

    The period is the smallest span covering the billing periods of all
    attached tasks. An invoice without tasks covers only its creation time.

    Args:
        invoice: The invoice with its tasks

    Returns:
        Tuple of (period start, period end)
    """
    if not invoice.tasks:
        return invoice.created_at, invoice.created_at

    periods = [task_bill_period(task) for task in invoice.tasks]
    return min(p[0] for p in periods), max(p[1] for p in periods)


def vat_summary(invoice: Invoice) -> Dict[Decimal, Decimal]:
    """Group the VAT amounts of the attached tasks by VAT rate.

    Args:
        invoice: The invoice with its tasks

    Returns:
        Mapping of VAT rate to the total VAT at that rate

    Example:
        >>> vat_summary(invoice)  # doctest: +SKIP
        {Decimal('21'): Decimal('52.50'), Decimal('9'): Decimal('4.50')}
    """
    summary: Dict[Decimal, Decimal] = defaultdict(lambda: Decimal("0.00"))
    for task in invoice.tasks:
        summary[task.vat_rate] += summarize_task(task).vat_amount
    return dict(summary)


def invoice_subtotal(invoice: Invoice) -> Decimal:
    """Sum of the amounts of all attached tasks."""
    return to_cents(
        sum((summarize_task(task).amount for task in invoice.tasks), Decimal("0"))
    )


def vat_is_charged(invoice: Invoice) -> bool:
    """Whether VAT applies, based on the pinned company revision."""
    return invoice.company_info is not None and invoice.company_info.vat_registered


def total_amount(invoice: Invoice) -> Decimal:
    """Calculate the amount due for an invoice.

    VAT is only added when the pinned company revision has a VAT
    registration number; otherwise the total equals the subtotal.

    Args:
        invoice: The invoice with its tasks and company revision

    Returns:
        Total amount due
    """
    subtotal = invoice_subtotal(invoice)
    if not vat_is_charged(invoice):
        return subtotal
    return to_cents(subtotal + sum(vat_summary(invoice).values(), Decimal("0")))


def calculate_invoice_totals(invoice: Invoice) -> InvoiceTotals:
    """Calculate the complete financial breakdown of an invoice.

    Args:
        invoice: The invoice with its tasks and company revision

    Returns:
        InvoiceTotals with lines, subtotal, VAT breakdown and total
    """
    lines = invoice_lines(invoice)
    subtotal = to_cents(sum((line.amount for line in lines), Decimal("0")))
    charged = vat_is_charged(invoice)

    summary: Dict[Decimal, Decimal] = {}
    if charged:
        summary = vat_summary(invoice)
    vat_total = to_cents(sum(summary.values(), Decimal("0")))

    return InvoiceTotals(
        lines=lines,
        subtotal=subtotal,
        vat_summary=summary,
        vat_total=vat_total,
        total_amount=to_cents(subtotal + vat_total),
        vat_charged=charged,
    )
