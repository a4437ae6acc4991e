"""Unit tests for the task commands."""

import pytest

from stoptime.cli import cli
from stoptime.models.invoice import InvoiceSelection
from stoptime.services.invoice_builder import InvoiceBuilder


@pytest.fixture
def billed(session_factory, clock, test_config, ledger):
    """Invoice for the fixed-cost task."""
    return InvoiceBuilder(session_factory, clock=clock, config=test_config).build(
        InvoiceSelection(
            customer_id=ledger["customer_id"], task_ids=[ledger["fixed_task_id"]]
        )
    )


class TestTaskList:
    """Test task list."""

    def test_list(self, runner, ledger):
        """Test unbilled tasks are listed with hours and amount."""
        result = runner.invoke(cli, ["task", "list", str(ledger["customer_id"])])

        assert result.exit_code == 0, result.output
        assert "Website" in result.output
        assert "5.00h" in result.output
        assert "€ 250.00" in result.output
        assert "Logo design" in result.output
        assert "€ 500.00" in result.output
        assert "Intranet" not in result.output

    def test_billed_tasks_hidden(self, runner, ledger, billed):
        """Test billed tasks are no longer listed."""
        result = runner.invoke(cli, ["task", "list", str(ledger["customer_id"])])

        assert "Website" in result.output
        assert "Logo design" not in result.output

    def test_no_tasks(self, runner, database_url):
        """Test the message for a customer without unbilled work."""
        runner.invoke(cli, ["customer", "add", "Initech"])

        result = runner.invoke(cli, ["task", "list", "1"])

        assert result.exit_code == 0
        assert "No unbilled tasks." in result.output


class TestTaskAdd:
    """Test task add."""

    def test_hourly(self, runner, ledger):
        """Test an hourly task gets the default VAT rate."""
        result = runner.invoke(
            cli, ["task", "add", str(ledger["customer_id"]), "Hosting", "--rate", "65"]
        )

        assert result.exit_code == 0, result.output
        assert "Created task" in result.output
        assert "Hosting" in result.output
        assert "€ 65.00" in result.output
        assert "21%" in result.output

    def test_fixed_cost(self, runner, ledger):
        """Test a fixed-cost task with its own VAT rate."""
        result = runner.invoke(
            cli,
            [
                "task",
                "add",
                str(ledger["customer_id"]),
                "Audit",
                "--fixed-cost",
                "750",
                "--vat",
                "9",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "€ 750.00" in result.output
        assert "9%" in result.output

    @pytest.mark.parametrize(
        "options", [[], ["--rate", "65", "--fixed-cost", "750"]]
    )
    def test_billing_mode_required(self, runner, ledger, options):
        """Test exactly one of rate and fixed cost must be given."""
        result = runner.invoke(
            cli, ["task", "add", str(ledger["customer_id"]), "Hosting"] + options
        )

        assert result.exit_code == 3
        assert "either a fixed cost or an hourly rate" in result.output

    def test_unknown_customer(self, runner, database_url):
        """Test adding a task for a customer that does not exist."""
        result = runner.invoke(cli, ["task", "add", "99", "Hosting", "--rate", "65"])

        assert result.exit_code == 4


class TestTaskEdit:
    """Test task edit."""

    def test_edit(self, runner, ledger):
        """Test an unbilled task is changed without warnings."""
        task_id = ledger["hourly_task_id"]
        result = runner.invoke(
            cli, ["task", "edit", str(task_id), "name=Website redesign", "vat_rate=9"]
        )

        assert result.exit_code == 0, result.output
        assert f"Task {task_id} saved" in result.output
        assert "Website redesign" in result.output
        assert "9%" in result.output
        assert "is billed" not in result.output

    def test_billed_task_warns(self, runner, ledger, billed):
        """Test corrections to a billed task name the invoice."""
        task_id = ledger["fixed_task_id"]
        result = runner.invoke(cli, ["task", "edit", str(task_id), "invoice_comment=Logo"])

        assert result.exit_code == 0, result.output
        assert f"is billed on invoice {billed.number}" in result.output
        assert f"Task {task_id} saved" in result.output


class TestTaskDelete:
    """Test task delete."""

    def test_delete(self, runner, ledger):
        """Test an unbilled task is deleted with its entries."""
        task_id = ledger["hourly_task_id"]
        result = runner.invoke(cli, ["task", "delete", str(task_id)])

        assert result.exit_code == 0, result.output
        assert f"Deleted task {task_id}" in result.output
        listing = runner.invoke(cli, ["task", "list", str(ledger["customer_id"])])
        assert "Website" not in listing.output

    def test_billed_task_kept(self, runner, ledger, billed):
        """Test a billed task cannot be deleted."""
        result = runner.invoke(cli, ["task", "delete", str(ledger["fixed_task_id"])])

        assert result.exit_code == 4
        assert "cannot delete it" in result.output
