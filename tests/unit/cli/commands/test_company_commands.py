"""Unit tests for the company information commands."""

import pytest

from stoptime.cli import cli
from stoptime.cli.utils.arguments import parse_assignments
from stoptime.cli.error_handlers import UsageError
from stoptime.models.invoice import InvoiceSelection
from stoptime.services.invoice_builder import InvoiceBuilder


@pytest.fixture
def published(session_factory, clock, test_config, ledger):
    """Invoice that pins the sample company revision."""
    return InvoiceBuilder(session_factory, clock=clock, config=test_config).build(
        InvoiceSelection(
            customer_id=ledger["customer_id"], task_ids=[ledger["fixed_task_id"]]
        )
    )


class TestParseAssignments:
    """Test parsing FIELD=VALUE arguments."""

    def test_valid(self):
        """Test values are split on the first equals sign."""
        assert parse_assignments(("name=Stop Time", "website=a=b")) == {
            "name": "Stop Time",
            "website": "a=b",
        }

    def test_empty_value_clears(self):
        """Test an empty value becomes None."""
        assert parse_assignments(("vatno=",)) == {"vatno": None}

    @pytest.mark.parametrize("value", ["vatno", "=value"])
    def test_invalid(self, value):
        """Test malformed assignments are usage errors."""
        with pytest.raises(UsageError):
            parse_assignments((value,))


class TestCompanyShow:
    """Test company show."""

    def test_default(self, runner, database_url):
        """Test a fresh database shows the default company."""
        result = runner.invoke(cli, ["company", "show"])

        assert result.exit_code == 0
        assert "My Company" in result.output
        assert "Revision 1" in result.output

    def test_existing(self, runner, ledger):
        """Test the stored company information is shown."""
        result = runner.invoke(cli, ["company", "show"])

        assert "Stop Time BV" in result.output
        assert "NL001234567B01" in result.output


class TestCompanyEdit:
    """Test company edit."""

    def test_edit_draft(self, runner, ledger):
        """Test an unused revision is edited in place."""
        result = runner.invoke(cli, ["company", "edit", "email=billing@stoptime.nl"])

        assert result.exit_code == 0
        assert "Company information saved" in result.output
        assert "billing@stoptime.nl" in result.output
        assert "used by invoices" not in result.output

    def test_edit_published(self, runner, ledger, published):
        """Test a used revision is superseded by a new one."""
        revision = ledger["company_info_id"]
        result = runner.invoke(cli, ["company", "edit", "name=Stop Time Holding BV"])

        assert result.exit_code == 0
        assert f"Revision {revision} is used by invoices" in result.output
        assert f"Supersedes revision {revision}" in result.output

        history = runner.invoke(cli, ["company", "history"])
        assert "Stop Time BV" in history.output
        assert "Stop Time Holding BV" in history.output

    def test_edit_superseded_revision(self, runner, ledger, published):
        """Test an old published revision cannot be edited."""
        runner.invoke(cli, ["company", "edit", "cell=0612345678"])
        result = runner.invoke(
            cli,
            ["company", "edit", "cell=0687654321", "--revision", str(ledger["company_info_id"])],
        )

        assert result.exit_code == 6
        assert "Not Allowed" in result.output
        assert "Edit the current company information instead" in result.output

    def test_unknown_field(self, runner, ledger):
        """Test unknown fields are validation errors."""
        result = runner.invoke(cli, ["company", "edit", "colour=red"])

        assert result.exit_code == 3
        assert "colour" in result.output

    def test_malformed_assignment(self, runner, ledger):
        """Test a malformed assignment is a usage error."""
        result = runner.invoke(cli, ["company", "edit", "vatno"])

        assert result.exit_code == 2
