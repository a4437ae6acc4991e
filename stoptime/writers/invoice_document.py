"""Invoice document data and output.

An InvoiceDocument is the plain data a typesetting template needs to print
an invoice: issuer and customer blocks, lines, VAT breakdown and totals and,
for customers that require it, a time specification per task. Rendering
itself is delegated to a renderer callable; the default writes JSON.
"""

import datetime as dt
import logging
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import Field

from stoptime.calculators.invoice_calculator import (
    calculate_invoice_totals,
    invoice_period,
)
from stoptime.calculators.invoice_status import due_date
from stoptime.calculators.task_calculator import billable_time_entries
from stoptime.calculators.time_utils import round_hours, timedelta_to_hours
from stoptime.models.base import BaseDataModel
from stoptime.models.company_info import CompanyInfo
from stoptime.models.customer import Customer
from stoptime.models.invoice import Invoice

logger = logging.getLogger(__name__)

Renderer = Callable[["InvoiceDocument"], Union[str, bytes]]


class DocumentLine(BaseDataModel):
    description: str
    hours: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    amount: Decimal
    vat_rate: Decimal


class SpecificationRow(BaseDataModel):
    date: dt.date
    start: dt.datetime
    end: dt.datetime
    comment: Optional[str] = None
    hours: Decimal


class TaskSpecification(BaseDataModel):
    description: str
    rows: List[SpecificationRow] = Field(default_factory=list)
    total_hours: Decimal


class InvoiceDocument(BaseDataModel):
    """Everything printed on an invoice.

    Attributes:
        number: Invoice number
        date: Invoice date
        due_date: Last day of the payment term
        period_start: Start of the invoiced period
        period_end: End of the invoiced period
        customer: Customer block
        company: Issuer block (the revision pinned by the invoice)
        lines: One line per billed task
        vat_summary: VAT total per rate, empty when VAT is not charged
        subtotal: Sum of the line amounts
        vat_total: Sum of the VAT
        total: Amount due
        specification: Time specification, present when requested
    """

    number: int
    date: dt.date
    due_date: dt.date
    period_start: dt.datetime
    period_end: dt.datetime
    customer: Customer
    company: CompanyInfo
    lines: List[DocumentLine]
    vat_summary: Dict[Decimal, Decimal] = Field(default_factory=dict)
    subtotal: Decimal
    vat_total: Decimal
    total: Decimal
    specification: Optional[List[TaskSpecification]] = None


def build_invoice_document(invoice: Invoice) -> InvoiceDocument:
    """Collect the printable data of an invoice.

    Args:
        invoice: Invoice with tasks, customer and company revision loaded

    Returns:
        InvoiceDocument

    Raises:
        ValueError: If the customer or company revision is not loaded
    """
    if invoice.customer is None or invoice.company_info is None:
        raise ValueError(
            f"Invoice {invoice.number} needs its customer and company revision"
        )

    totals = calculate_invoice_totals(invoice)
    start, end = invoice_period(invoice)

    lines = [
        DocumentLine(
            description=line.description,
            # Hours are not printed for fixed-cost work
            hours=round_hours(line.hours) if line.hourly_rate is not None else None,
            hourly_rate=line.hourly_rate,
            amount=line.amount,
            vat_rate=line.vat_rate,
        )
        for line in totals.lines
    ]

    specification = None
    if invoice.include_specification:
        specification = []
        for task in invoice.tasks:
            entries = billable_time_entries(task)
            rows = [
                SpecificationRow(
                    date=entry.date,
                    start=entry.start,
                    end=entry.end,
                    comment=entry.comment,
                    hours=entry.hours_total,
                )
                for entry in entries
            ]
            specification.append(
                TaskSpecification(
                    description=task.display_name,
                    rows=rows,
                    total_hours=round_hours(
                        timedelta_to_hours(
                            sum((entry.duration for entry in entries), dt.timedelta())
                        )
                    ),
                )
            )

    return InvoiceDocument(
        number=invoice.number,
        date=invoice.created_at.date(),
        due_date=due_date(invoice).date(),
        period_start=start,
        period_end=end,
        customer=invoice.customer,
        company=invoice.company_info,
        lines=lines,
        vat_summary=totals.vat_summary,
        subtotal=totals.subtotal,
        vat_total=totals.vat_total,
        total=totals.total_amount,
        specification=specification,
    )


def render_json(document: InvoiceDocument) -> str:
    return document.model_dump_json(indent=2)


class InvoiceDocumentWriter:
    """Writes invoice documents to a directory, one file per invoice.

    Writing is idempotent: an existing document for the same invoice number
    is left alone, so the writer can be re-run safely after a failure.

    Example:
        >>> writer = InvoiceDocumentWriter("invoices")
        >>> writer.write(invoice)
        PosixPath('invoices/202401.json')
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        renderer: Renderer = render_json,
        extension: str = "json",
    ):
        self.output_dir = Path(output_dir)
        self.renderer = renderer
        self.extension = extension.lstrip(".")

    def path_for(self, number: int) -> Path:
        return self.output_dir / f"{number}.{self.extension}"

    def write(self, invoice: Invoice, overwrite: bool = False) -> Path:
        """Render and store the document of an invoice.

        Args:
            invoice: Invoice to write
            overwrite: Replace an existing document

        Returns:
            Path of the document
        """
        path = self.path_for(invoice.number)
        if path.exists() and not overwrite:
            logger.info(f"Document for invoice {invoice.number} exists, skipping")
            return path

        content = self.renderer(build_invoice_document(invoice))
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Write to a temporary file first so a crash never leaves half a document
        tmp_path = path.with_name(path.name + ".tmp")
        if isinstance(content, bytes):
            tmp_path.write_bytes(content)
        else:
            tmp_path.write_text(content, encoding="utf-8")
        tmp_path.replace(path)

        logger.info(f"Wrote document for invoice {invoice.number} to {path}")
        return path
