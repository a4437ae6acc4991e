"""Task commands: list, add, edit and delete tasks of a customer."""

from typing import Optional, Tuple

import click

from stoptime.calculators.task_calculator import summarize_task
from stoptime.cli.error_handlers import with_error_handling
from stoptime.cli.utils.arguments import parse_assignments
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import (
    format_hours,
    format_info,
    format_money,
    format_rate,
    format_success,
    format_table,
    format_warning,
)
from stoptime.models.task import Task
from stoptime.services.ledger import (
    create_task,
    delete_task,
    unbilled_tasks,
    update_task,
)
from stoptime.storage.base import session_scope

TASK_HEADERS = ["Id", "Name", "Fixed cost", "Rate", "VAT", "Hours", "Amount"]


def _task_row(task: Task) -> list:
    summary = summarize_task(task)
    return [
        task.id,
        task.name,
        format_money(task.fixed_cost),
        format_money(task.hourly_rate),
        format_rate(task.vat_rate),
        format_hours(summary.hours),
        format_money(summary.amount),
    ]


@click.group(name="task")
def task():
    """Manage the tasks of a customer."""


@task.command(name="list")
@click.argument("customer_id", type=int)
@click.pass_context
def list_tasks(ctx: click.Context, customer_id: int):
    """List the unbilled tasks of a customer.

    Example:
        stoptime task list 3
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            tasks = unbilled_tasks(session, customer_id)

        if not tasks:
            click.echo(format_info("No unbilled tasks."))
            return
        click.echo(format_table(TASK_HEADERS, [_task_row(t) for t in tasks]))


@task.command(name="add")
@click.argument("customer_id", type=int)
@click.argument("name")
@click.option("--rate", "hourly_rate", default=None, help="Hourly rate")
@click.option("--fixed-cost", default=None, help="Fixed amount for the whole task")
@click.option("--vat", "vat_rate", default=None, help="VAT percentage")
@click.pass_context
def add_task(
    ctx: click.Context,
    customer_id: int,
    name: str,
    hourly_rate: Optional[str],
    fixed_cost: Optional[str],
    vat_rate: Optional[str],
):
    """Add a task billed by the hour or at a fixed cost.

    Example:
        stoptime task add 3 "Website" --rate 65
        stoptime task add 3 "Logo design" --fixed-cost 500 --vat 21
    """
    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(config)
        with session_scope(session_factory) as session:
            created = create_task(
                session,
                customer_id,
                name,
                fixed_cost=fixed_cost,
                hourly_rate=hourly_rate,
                vat_rate=vat_rate,
                config=config,
            )

        click.echo(format_success(f"Created task {created.id}"))
        click.echo(format_table(TASK_HEADERS, [_task_row(created)]))


@task.command(name="edit")
@click.argument("task_id", type=int)
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def edit_task(ctx: click.Context, task_id: int, assignments: Tuple[str, ...]):
    """Change fields of a task.

    Billed tasks can still be corrected; a warning names the invoice.

    Example:
        stoptime task edit 7 name="Website redesign" vat_rate=9
    """
    with with_error_handling(ctx.obj["debug"]):
        changes = parse_assignments(assignments)
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            updated, warnings = update_task(session, task_id, **changes)

        for warning in warnings:
            click.echo(format_warning(warning))
        click.echo(format_success(f"Task {updated.id} saved"))
        click.echo(format_table(TASK_HEADERS, [_task_row(updated)]))


@task.command(name="delete")
@click.argument("task_id", type=int)
@click.pass_context
def remove_task(ctx: click.Context, task_id: int):
    """Delete an unbilled task and its time entries.

    Example:
        stoptime task delete 7
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            delete_task(session, task_id)
        click.echo(format_success(f"Deleted task {task_id}"))
