"""Overview command: unbilled work per customer."""

from typing import Optional

import click

from stoptime.aggregators.invoice_aggregator import InvoiceAggregator
from stoptime.cli.error_handlers import with_error_handling
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import (
    format_hours,
    format_info,
    format_money,
    format_table,
)
from stoptime.services.ledger import unbilled_tasks
from stoptime.storage.base import session_scope
from stoptime.storage.repository import BillingRepository, to_customer


@click.command(name="overview")
@click.option("--customer", "customer_id", type=int, default=None, help="Customer id")
@click.pass_context
def overview(ctx: click.Context, customer_id: Optional[int]):
    """Show the unbilled tasks of every customer.

    Hourly-rate tasks show their registered hours and amount; fixed-cost
    tasks show their fixed amount.

    Example:
        stoptime overview
        stoptime overview --customer 3
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            customers = [
                to_customer(record)
                for record in BillingRepository(session).list_customers()
                if customer_id is None or record.id == customer_id
            ]
            pairs = [(c, unbilled_tasks(session, c.id)) for c in customers]

        if not customers:
            click.echo(format_info("No customers found."))
            return

        frame = InvoiceAggregator().unbilled_overview(pairs)
        for customer, tasks in pairs:
            click.echo()
            click.echo(click.style(f"{customer.name} (#{customer.id})", bold=True))
            if not tasks:
                click.echo(format_info("No unbilled tasks."))
                continue

            task_rows = frame[frame["task_id"].isin([t.id for t in tasks])]
            rows = [
                [
                    row.task_id,
                    row.task,
                    format_hours(row.hours),
                    format_money(row.amount),
                ]
                for row in task_rows.itertuples()
            ]
            click.echo(format_table(["Task", "Name", "Hours", "Amount"], rows))
