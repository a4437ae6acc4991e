"""Customer commands: list, add, edit and delete customers."""

from typing import Optional, Tuple

import click

from stoptime.cli.error_handlers import with_error_handling
from stoptime.cli.utils.arguments import parse_assignments
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import (
    format_info,
    format_money,
    format_success,
    format_table,
)
from stoptime.models.customer import Customer
from stoptime.services.ledger import (
    create_customer,
    delete_customer,
    update_customer,
)
from stoptime.storage.base import session_scope
from stoptime.storage.repository import BillingRepository, to_customer


def _customer_row(customer: Customer) -> list:
    return [
        customer.id,
        customer.name,
        customer.short_name or "",
        format_money(customer.hourly_rate),
        "yes" if customer.time_specification else "no",
    ]


CUSTOMER_HEADERS = ["Id", "Name", "Short name", "Rate", "Specification"]


@click.group(name="customer")
def customer():
    """Manage customers."""


@customer.command(name="list")
@click.pass_context
def list_customers(ctx: click.Context):
    """List all customers.

    Example:
        stoptime customer list
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            customers = [
                to_customer(record)
                for record in BillingRepository(session).list_customers()
            ]

        if not customers:
            click.echo(format_info("No customers found."))
            return
        click.echo(format_table(CUSTOMER_HEADERS, [_customer_row(c) for c in customers]))


@customer.command(name="add")
@click.argument("name")
@click.option("--short-name", default=None, help="Short name used in overviews")
@click.option(
    "--rate",
    "hourly_rate",
    default=None,
    help="Hourly rate (defaults to DEFAULT_HOURLY_RATE)",
)
@click.option(
    "--time-specification",
    is_flag=True,
    help="Print a time specification on invoices",
)
@click.option("--email", default=None, help="Email address")
@click.pass_context
def add_customer(
    ctx: click.Context,
    name: str,
    short_name: Optional[str],
    hourly_rate: Optional[str],
    time_specification: bool,
    email: Optional[str],
):
    """Add a customer.

    Example:
        stoptime customer add "Acme Corp" --short-name Acme --rate 65
    """
    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(config)
        with session_scope(session_factory) as session:
            created = create_customer(
                session,
                config=config,
                name=name,
                short_name=short_name,
                hourly_rate=hourly_rate,
                time_specification=time_specification,
                email=email,
            )

        click.echo(format_success(f"Created customer {created.id}"))
        click.echo(format_table(CUSTOMER_HEADERS, [_customer_row(created)]))


@customer.command(name="edit")
@click.argument("customer_id", type=int)
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def edit_customer(
    ctx: click.Context, customer_id: int, assignments: Tuple[str, ...]
):
    """Change fields of a customer.

    Example:
        stoptime customer edit 3 hourly_rate=70 financial_contact="J. Smith"
    """
    with with_error_handling(ctx.obj["debug"]):
        changes = parse_assignments(assignments)
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            updated = update_customer(session, customer_id, **changes)

        click.echo(format_success(f"Customer {updated.id} saved"))
        click.echo(format_table(CUSTOMER_HEADERS, [_customer_row(updated)]))


@customer.command(name="delete")
@click.argument("customer_id", type=int)
@click.pass_context
def remove_customer(ctx: click.Context, customer_id: int):
    """Delete a customer without tasks or invoices.

    Example:
        stoptime customer delete 3
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            delete_customer(session, customer_id)
        click.echo(format_success(f"Deleted customer {customer_id}"))
