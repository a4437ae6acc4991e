"""CLI commands."""

from stoptime.cli.commands.company import company
from stoptime.cli.commands.customer import customer
from stoptime.cli.commands.db import init_db
from stoptime.cli.commands.entry import entry, show_timeline
from stoptime.cli.commands.invoice import invoice
from stoptime.cli.commands.overview import overview
from stoptime.cli.commands.task import task

__all__ = [
    "company",
    "customer",
    "entry",
    "init_db",
    "invoice",
    "overview",
    "show_timeline",
    "task",
]
