"""StopTime CLI.

This module provides a command-line interface for the billing engine.
It includes commands for customers, tasks and time entries, the
timeline of registered time, invoicing, the overview of unbilled work
and the company profile.
"""

from typing import Optional

import click
from pydantic import ValidationError

from stoptime.cli.commands.company import company
from stoptime.cli.commands.customer import customer
from stoptime.cli.commands.db import init_db
from stoptime.cli.commands.entry import entry, show_timeline
from stoptime.cli.commands.invoice import invoice
from stoptime.cli.commands.overview import overview
from stoptime.cli.commands.task import task
from stoptime.cli.error_handlers import ConfigurationError, handle_cli_error
from stoptime.config.logging_config import LoggingConfig, configure_logging
from stoptime.config.settings import reload_config

__version__ = "1.0.0"


@click.group(help="StopTime - Track billable time and create invoices")
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show debug logging and stack traces")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read settings from this .env file",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, env_file: Optional[str]):
    """StopTime CLI main entry point."""
    try:
        config = reload_config(env_file)
    except ValidationError as e:
        ctx.exit(
            handle_cli_error(
                ConfigurationError(
                    f"Invalid settings: {e.error_count()} error(s)\n{e}",
                    recovery_hint="Check your environment variables or .env file",
                ),
                debug,
            )
        )

    logging_config = LoggingConfig.from_settings(config)
    if debug:
        logging_config.log_level = "DEBUG"
    configure_logging(logging_config)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["debug"] = debug or config.debug


# Register commands
cli.add_command(init_db)
cli.add_command(overview)
cli.add_command(invoice)
cli.add_command(company)
cli.add_command(customer)
cli.add_command(task)
cli.add_command(entry)
cli.add_command(show_timeline)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
