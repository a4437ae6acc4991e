"""Invoice reporting with pandas.

This module turns invoices and unbilled tasks into DataFrames for the
overview screens and reports:
- Invoice register (one row per invoice with derived totals and status)
- Invoices grouped by the month their period starts
- Monthly totals
- Unbilled work per customer
"""

import datetime as dt
import logging
from collections import OrderedDict, defaultdict
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from stoptime.calculators.invoice_calculator import (
    calculate_invoice_totals,
    invoice_period,
)
from stoptime.calculators.invoice_status import due_date, invoice_status
from stoptime.calculators.task_calculator import summarize_task
from stoptime.models.customer import Customer
from stoptime.models.invoice import Invoice
from stoptime.models.task import Task

logger = logging.getLogger(__name__)

REGISTER_COLUMNS = [
    "number",
    "customer",
    "date",
    "period_start",
    "period_end",
    "subtotal",
    "vat",
    "total",
    "paid",
    "status",
    "due_date",
]
OVERVIEW_COLUMNS = ["customer", "task_id", "task", "billing_mode", "hours", "amount"]
MONEY_COLUMNS = ["subtotal", "vat", "total"]


def _decimal_sum(values: pd.Series) -> Decimal:
    return sum(values, Decimal("0.00"))


def _month_start(value: dt.datetime) -> dt.date:
    return value.date().replace(day=1)


class InvoiceAggregator:
    """Builds reporting frames from invoices and unbilled tasks.

    Monetary values stay Decimals (object columns) so that sums match the
    amounts printed on the invoices to the cent.

    Example:
        >>> aggregator = InvoiceAggregator()
        >>> register = aggregator.invoice_register(invoices, clock.now())
        >>> aggregator.monthly_totals(register).loc["2024-01", "total"]
        Decimal('302.50')
    """

    def invoice_register(
        self, invoices: Sequence[Invoice], now: dt.datetime
    ) -> pd.DataFrame:
        """Build the invoice register.

        Args:
            invoices: Invoices with tasks, customer and company revision loaded
            now: Moment at which the status is derived

        Returns:
            DataFrame with REGISTER_COLUMNS, one row per invoice, by number
        """
        logger.info(f"Building invoice register for {len(invoices)} invoice(s)")

        rows = []
        for invoice in invoices:
            totals = calculate_invoice_totals(invoice)
            start, end = invoice_period(invoice)
            rows.append(
                {
                    "number": invoice.number,
                    "customer": (
                        invoice.customer.display_short_name
                        if invoice.customer is not None
                        else str(invoice.customer_id)
                    ),
                    "date": invoice.created_at.date(),
                    "period_start": start,
                    "period_end": end,
                    "subtotal": totals.subtotal,
                    "vat": totals.vat_total,
                    "total": totals.total_amount,
                    "paid": invoice.paid,
                    "status": invoice_status(invoice, now).value,
                    "due_date": due_date(invoice).date(),
                }
            )

        if not rows:
            return pd.DataFrame(columns=REGISTER_COLUMNS)

        return pd.DataFrame(rows, columns=REGISTER_COLUMNS).sort_values(
            "number", ignore_index=True
        )

    def invoices_by_period(
        self, invoices: Sequence[Invoice]
    ) -> "OrderedDict[dt.date, List[Invoice]]":
        """Group invoices by the first day of the month their period starts.

        Returns:
            Mapping of month start to invoices, most recent month first
        """
        groups: Dict[dt.date, List[Invoice]] = defaultdict(list)
        for invoice in invoices:
            groups[_month_start(invoice_period(invoice)[0])].append(invoice)

        return OrderedDict(
            (month, sorted(groups[month], key=lambda i: i.number))
            for month in sorted(groups, reverse=True)
        )

    def monthly_totals(self, register: pd.DataFrame) -> pd.DataFrame:
        """Sum subtotal, VAT and total per month of the invoice date.

        Args:
            register: Frame produced by invoice_register

        Returns:
            DataFrame indexed by ``YYYY-MM`` with money columns and an
            ``invoices`` count
        """
        if register.empty:
            return pd.DataFrame(columns=MONEY_COLUMNS + ["invoices"])

        months = register["date"].map(lambda d: f"{d.year}-{d.month:02d}")
        grouped = register.groupby(months)

        totals = pd.DataFrame(
            {column: grouped[column].agg(_decimal_sum) for column in MONEY_COLUMNS}
        )
        totals["invoices"] = grouped["number"].count()
        totals.index.name = "month"
        return totals.sort_index()

    def unbilled_overview(
        self, tasks_by_customer: Sequence[Tuple[Customer, Sequence[Task]]]
    ) -> pd.DataFrame:
        """Summarize unbilled work per customer.

        Args:
            tasks_by_customer: Pairs of customer and its unbilled tasks

        Returns:
            DataFrame with OVERVIEW_COLUMNS, sorted by customer name. Hours
            are empty for fixed-cost tasks.
        """
        rows = []
        for customer, tasks in tasks_by_customer:
            for task in tasks:
                summary = summarize_task(task)
                rows.append(
                    {
                        "customer": customer.name,
                        "task_id": task.id,
                        "task": task.name,
                        "billing_mode": task.billing_mode,
                        "hours": None if task.is_fixed_cost else summary.hours,
                        "amount": summary.amount,
                    }
                )

        logger.debug(f"Unbilled overview has {len(rows)} task(s)")

        if not rows:
            return pd.DataFrame(columns=OVERVIEW_COLUMNS)

        return pd.DataFrame(rows, columns=OVERVIEW_COLUMNS).sort_values(
            ["customer", "task_id"], ignore_index=True
        )
