"""Database initialisation command."""

import click

from stoptime.cli.error_handlers import with_error_handling
from stoptime.cli.utils.database import open_session_factory
from stoptime.cli.utils.formatters import format_info, format_success
from stoptime.services.company_profile import current_company_info
from stoptime.storage.base import session_scope


@click.command(name="init-db")
@click.pass_context
def init_db(ctx: click.Context):
    """Create the database tables and the default company information.

    Safe to run more than once.

    Example:
        stoptime init-db
    """
    config = ctx.obj["config"]
    with with_error_handling(ctx.obj["debug"]):
        click.echo(format_info(f"Initialising database {config.database_url}"))
        session_factory = open_session_factory(config)
        with session_scope(session_factory) as session:
            company_info = current_company_info(session)
        click.echo(
            format_success(
                f"Database ready (company information revision {company_info.id})"
            )
        )
