"""Invoice commands: create, list, show, pay and write documents."""

from typing import Dict, Optional, Tuple

import click
from pydantic import ValidationError

from stoptime.aggregators.invoice_aggregator import InvoiceAggregator
from stoptime.calculators.invoice_calculator import (
    calculate_invoice_totals,
    invoice_period,
)
from stoptime.calculators.invoice_status import due_date, invoice_status
from stoptime.cli.error_handlers import UsageError, with_error_handling
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import (
    format_hours,
    format_info,
    format_money,
    format_period,
    format_rate,
    format_success,
    format_table,
)
from stoptime.clock import SystemClock
from stoptime.errors import BillingValidationError
from stoptime.models.invoice import Invoice, InvoiceSelection
from stoptime.services.invoice_builder import InvoiceBuilder
from stoptime.services.invoice_lifecycle import (
    get_invoice,
    list_invoices,
    mark_invoice_paid,
)
from stoptime.storage.base import session_scope
from stoptime.writers.invoice_document import InvoiceDocumentWriter


def parse_comments(values: Tuple[str, ...]) -> Dict[int, str]:
    """Parse ``TASK_ID=TEXT`` options into a comment per task id.

    Raises:
        UsageError: If a value is not of the form TASK_ID=TEXT
    """
    comments: Dict[int, str] = {}
    for value in values:
        task_id, sep, text = value.partition("=")
        if not sep or not task_id.strip().isdigit():
            raise UsageError(
                f"Invalid comment '{value}'",
                recovery_hint="Use --comment TASK_ID=TEXT, e.g. --comment 4='Design'",
            )
        comments[int(task_id)] = text
    return comments


def _print_invoice(invoice: Invoice, now) -> None:
    totals = calculate_invoice_totals(invoice)
    start, end = invoice_period(invoice)

    click.echo(click.style(f"Invoice {invoice.number}", bold=True))
    click.echo(f"Customer: {invoice.customer.name if invoice.customer else ''}")
    click.echo(f"Date:     {invoice.created_at:%Y-%m-%d}")
    click.echo(f"Due:      {due_date(invoice):%Y-%m-%d}")
    click.echo(f"Period:   {format_period(start, end)}")
    click.echo(f"Status:   {invoice_status(invoice, now).value}")
    click.echo()

    rows = [
        [
            line.description,
            format_hours(line.hours) if line.hourly_rate is not None else "",
            format_money(line.hourly_rate),
            format_money(line.amount),
            format_rate(line.vat_rate),
        ]
        for line in totals.lines
    ]
    click.echo(format_table(["Description", "Hours", "Rate", "Amount", "VAT"], rows))
    click.echo(f"Subtotal: {format_money(totals.subtotal)}")
    if totals.vat_charged:
        for rate, amount in sorted(totals.vat_summary.items()):
            click.echo(f"VAT {format_rate(rate)}: {format_money(amount)}")
    else:
        click.echo("VAT not charged")
    click.echo(click.style(f"Total:    {format_money(totals.total_amount)}", bold=True))


@click.group(name="invoice")
def invoice():
    """Create and manage invoices."""


@invoice.command(name="create")
@click.argument("customer_id", type=int)
@click.option("--entry", "entry_ids", type=int, multiple=True, help="Time entry id")
@click.option("--task", "task_ids", type=int, multiple=True, help="Fixed-cost task id")
@click.option(
    "--comment",
    "comments",
    multiple=True,
    help="Invoice comment for a task, as TASK_ID=TEXT",
)
@click.option("--document", is_flag=True, help="Also write the invoice document")
@click.pass_context
def create_invoice(
    ctx: click.Context,
    customer_id: int,
    entry_ids: Tuple[int, ...],
    task_ids: Tuple[int, ...],
    comments: Tuple[str, ...],
    document: bool,
):
    """Create an invoice for selected unbilled work of a customer.

    Example:
        stoptime invoice create 1 --entry 10 --entry 11 --task 4
        stoptime invoice create 1 --entry 10 --comment 3="Website redesign"
    """
    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        try:
            selection = InvoiceSelection(
                customer_id=customer_id,
                time_entry_ids=list(entry_ids),
                task_ids=list(task_ids),
                comments=parse_comments(comments),
            )
        except ValidationError as e:
            raise BillingValidationError.from_pydantic(e) from e

        clock = SystemClock()
        builder = InvoiceBuilder(open_session_factory(config), clock=clock, config=config)
        created = builder.build(selection)

        click.echo(format_success(f"Created invoice {created.number}"))
        click.echo()
        _print_invoice(created, clock.now())

        if document:
            path = InvoiceDocumentWriter(config.document_dir).write(created)
            click.echo(format_success(f"Document written to {path}"))


REGISTER_HEADERS = ["Number", "Customer", "Date", "Period", "Total", "Status"]


def _register_rows(register) -> list:
    return [
        [
            row.number,
            row.customer,
            f"{row.date:%Y-%m-%d}",
            format_period(row.period_start, row.period_end),
            format_money(row.total),
            row.status,
        ]
        for row in register.itertuples()
    ]


@invoice.command(name="list")
@click.option("--customer", "customer_id", type=int, default=None, help="Customer id")
@click.option("--totals", is_flag=True, help="Show totals per month")
@click.option(
    "--by-period", is_flag=True, help="Group invoices by the month their work started"
)
@click.pass_context
def list_invoices_command(
    ctx: click.Context, customer_id: Optional[int], totals: bool, by_period: bool
):
    """List invoices with their amounts and payment status.

    Example:
        stoptime invoice list
        stoptime invoice list --customer 3 --totals
        stoptime invoice list --by-period
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            invoices = list_invoices(session, customer_id)

        if not invoices:
            click.echo(format_info("No invoices found."))
            return

        aggregator = InvoiceAggregator()
        now = SystemClock().now()
        register = aggregator.invoice_register(invoices, now)

        if by_period:
            for month, group in aggregator.invoices_by_period(invoices).items():
                click.echo(click.style(f"{month:%B %Y}", bold=True))
                click.echo(
                    format_table(
                        REGISTER_HEADERS,
                        _register_rows(aggregator.invoice_register(group, now)),
                    )
                )
                click.echo()
        else:
            click.echo(format_table(REGISTER_HEADERS, _register_rows(register)))

        if totals:
            monthly = aggregator.monthly_totals(register)
            click.echo()
            click.echo(
                format_table(
                    ["Month", "Invoices", "Subtotal", "VAT", "Total"],
                    [
                        [
                            month,
                            row.invoices,
                            format_money(row.subtotal),
                            format_money(row.vat),
                            format_money(row.total),
                        ]
                        for month, row in monthly.iterrows()
                    ],
                )
            )


@invoice.command(name="show")
@click.argument("number", type=int)
@click.pass_context
def show_invoice(ctx: click.Context, number: int):
    """Show an invoice with its lines and totals.

    Example:
        stoptime invoice show 202401
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            found = get_invoice(session, number)
        _print_invoice(found, SystemClock().now())


@invoice.command(name="pay")
@click.argument("number", type=int)
@click.pass_context
def pay_invoice(ctx: click.Context, number: int):
    """Mark an invoice as paid.

    Example:
        stoptime invoice pay 202401
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            paid = mark_invoice_paid(session, number)
        click.echo(format_success(f"Invoice {paid.number} is paid"))


@invoice.command(name="document")
@click.argument("number", type=int)
@click.option("--overwrite", is_flag=True, help="Replace an existing document")
@click.pass_context
def write_document(ctx: click.Context, number: int, overwrite: bool):
    """Write the document of an invoice to the document directory.

    Example:
        stoptime invoice document 202401
    """
    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(config)
        with session_scope(session_factory) as session:
            found = get_invoice(session, number)
        path = InvoiceDocumentWriter(config.document_dir).write(found, overwrite)
        click.echo(format_success(f"Document written to {path}"))
