"""Company information commands."""

from typing import Optional, Tuple

import click

from stoptime.cli.error_handlers import with_error_handling
from stoptime.cli.utils.arguments import parse_assignments
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import format_success, format_table, format_warning
from stoptime.models.company_info import EDITABLE_FIELDS, CompanyInfo
from stoptime.services.company_profile import (
    company_revisions,
    current_company_info,
    edit_company_info,
)
from stoptime.storage.base import session_scope


def _print_company(company_info: CompanyInfo) -> None:
    rows = [[name, getattr(company_info, name) or ""] for name in EDITABLE_FIELDS]
    click.echo(click.style(f"Revision {company_info.id}", bold=True))
    if company_info.original_id is not None:
        click.echo(f"Supersedes revision {company_info.original_id}")
    click.echo(format_table(["Field", "Value"], rows))


@click.group(name="company")
def company():
    """Show and edit the company information printed on invoices."""


@company.command(name="show")
@click.pass_context
def show_company(ctx: click.Context):
    """Show the current company information.

    Example:
        stoptime company show
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            company_info = current_company_info(session)
        _print_company(company_info)


@company.command(name="edit")
@click.argument("assignments", nargs=-1, required=True)
@click.option(
    "--revision",
    "revision_id",
    type=int,
    default=None,
    help="Revision to edit (defaults to the current one)",
)
@click.pass_context
def edit_company(
    ctx: click.Context, assignments: Tuple[str, ...], revision_id: Optional[int]
):
    """Edit company information.

    Revisions already used by invoices are never changed; editing the
    current one creates a new revision.

    Example:
        stoptime company edit name="Acme Consulting" vatno=NL123456789B01
    """
    with with_error_handling(ctx.obj["debug"]):
        changes = parse_assignments(assignments)
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            if revision_id is None:
                revision_id = current_company_info(session).id
            saved = edit_company_info(session, revision_id, changes)

        if saved.id != revision_id:
            click.echo(
                format_warning(
                    f"Revision {revision_id} is used by invoices; "
                    f"saved as new revision {saved.id}"
                )
            )
        click.echo(format_success("Company information saved"))
        _print_company(saved)


@company.command(name="history")
@click.pass_context
def company_history(ctx: click.Context):
    """List all company information revisions.

    Example:
        stoptime company history
    """
    with with_error_handling(ctx.obj["debug"]):
        session_factory = open_session_factory(ctx.obj["config"])
        with session_scope(session_factory) as session:
            revisions = company_revisions(session)

        rows = [
            [
                r.id,
                r.original_id or "",
                r.name,
                r.vatno or "",
                f"{r.created_at:%Y-%m-%d %H:%M}" if r.created_at else "",
            ]
            for r in revisions
        ]
        headers = ["Revision", "Supersedes", "Name", "VAT no", "Created"]
        click.echo(format_table(headers, rows))
