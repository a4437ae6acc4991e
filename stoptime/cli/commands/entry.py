"""Time entry commands and the timeline of registered time."""

import datetime as dt
from typing import Optional

import click

from stoptime.cli.error_handlers import with_error_handling
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import (
    format_hours,
    format_info,
    format_success,
    format_table,
)
from stoptime.models.time_entry import TimeEntry
from stoptime.services.ledger import (
    delete_time_entry,
    register_time_entry,
    timeline,
    update_time_entry,
)
from stoptime.storage.base import session_scope

TIME = click.DateTime(formats=["%H:%M"])
DATE = click.DateTime(formats=["%Y-%m-%d"])

ENTRY_HEADERS = ["Id", "Task", "Date", "Start", "End", "Hours", "Bill", "Comment"]


def _entry_row(entry: TimeEntry) -> list:
    return [
        entry.id,
        entry.task_id,
        f"{entry.date:%Y-%m-%d}",
        f"{entry.start:%H:%M}",
        f"{entry.end:%H:%M}",
        format_hours(entry.hours_total),
        "yes" if entry.bill else "no",
        entry.comment or "",
    ]


def _time(value: Optional[dt.datetime]) -> Optional[dt.time]:
    return value.time() if value is not None else None


def _date(value: Optional[dt.datetime]) -> Optional[dt.date]:
    return value.date() if value is not None else None


@click.group(name="entry")
def entry():
    """Register and correct time entries."""


@entry.command(name="add")
@click.argument("task_id", type=int)
@click.argument("start", type=TIME)
@click.argument("end", type=TIME)
@click.option("--date", "date", type=DATE, default=None, help="Date of work (default today)")
@click.option("--comment", default=None, help="What was done")
@click.option("--no-bill", is_flag=True, help="Register the time without billing it")
@click.pass_context
def add_entry(
    ctx: click.Context,
    task_id: int,
    start: dt.datetime,
    end: dt.datetime,
    date: Optional[dt.datetime],
    comment: Optional[str],
    no_bill: bool,
):
    """Register time on a task.

    Start and end are rounded to the configured resolution. An end at or
    before the start is taken to be on the next day.

    Example:
        stoptime entry add 7 09:00 12:30 --date 2024-01-08 --comment "Design"
    """
    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(config)
        with session_scope(session_factory) as session:
            created = register_time_entry(
                session,
                task_id,
                start.time(),
                end.time(),
                date=_date(date),
                comment=comment,
                bill=not no_bill,
                config=config,
            )

        click.echo(format_success(f"Registered time entry {created.id}"))
        click.echo(format_table(ENTRY_HEADERS, [_entry_row(created)]))


@entry.command(name="edit")
@click.argument("entry_id", type=int)
@click.option("--start", type=TIME, default=None, help="New start time")
@click.option("--end", type=TIME, default=None, help="New end time")
@click.option("--date", "date", type=DATE, default=None, help="New date of work")
@click.option("--comment", default=None, help="New comment")
@click.option("--bill/--no-bill", default=None, help="Change the billing intent")
@click.pass_context
def edit_entry(
    ctx: click.Context,
    entry_id: int,
    start: Optional[dt.datetime],
    end: Optional[dt.datetime],
    date: Optional[dt.datetime],
    comment: Optional[str],
    bill: Optional[bool],
):
    """Correct a time entry of an unbilled task.

    Example:
        stoptime entry edit 12 --end 13:00 --no-bill
    """
    changes = {}
    if date is not None:
        changes["date"] = date.date()
    if comment is not None:
        changes["comment"] = comment
    if bill is not None:
        changes["bill"] = bill

    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(config)
        with session_scope(session_factory) as session:
            updated = update_time_entry(
                session,
                entry_id,
                start=_time(start),
                end=_time(end),
                config=config,
                **changes,
            )

        click.echo(format_success(f"Time entry {updated.id} saved"))
        click.echo(format_table(ENTRY_HEADERS, [_entry_row(updated)]))


@entry.command(name="delete")
@click.argument("entry_id", type=int)
@click.pass_context
def remove_entry(ctx: click.Context, entry_id: int):
    """Delete a time entry of an unbilled task.

    Example:
        stoptime entry delete 12
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            delete_time_entry(session, entry_id)
        click.echo(format_success(f"Deleted time entry {entry_id}"))


@click.command(name="timeline")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N entries")
@click.pass_context
def show_timeline(ctx: click.Context, limit: Optional[int]):
    """Show registered time of all customers, most recent first.

    Example:
        stoptime timeline --limit 20
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            rows = timeline(session, limit)

        if not rows:
            click.echo(format_info("No time registered."))
            return

        click.echo(
            format_table(
                ["Entry", "Customer", "Task", "Date", "Start", "End", "Hours", "Invoice"],
                [
                    [
                        row.entry.id,
                        row.customer.display_short_name,
                        row.task.name,
                        f"{row.entry.date:%Y-%m-%d}",
                        f"{row.entry.start:%H:%M}",
                        f"{row.entry.end:%H:%M}",
                        format_hours(row.entry.hours_total),
                        row.invoice_number or "",
                    ]
                    for row in rows
                ],
            )
        )
