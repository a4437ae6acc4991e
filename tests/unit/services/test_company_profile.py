"""Unit tests for company information revisions."""

import pytest

from stoptime.errors import BillingValidationError, ImmutabilityViolation
from stoptime.models.invoice import InvoiceSelection
from stoptime.services.company_profile import (
    DEFAULT_COMPANY_INFO,
    EditAction,
    RevisionState,
    company_revisions,
    current_company_info,
    edit_company_info,
    plan_company_edit,
)
from stoptime.services.invoice_builder import InvoiceBuilder
from stoptime.services.invoice_lifecycle import get_invoice


@pytest.fixture
def published(session_factory, clock, test_config, ledger):
    """Invoice 202401 pinning the sample company revision."""
    return InvoiceBuilder(session_factory, clock=clock, config=test_config).build(
        InvoiceSelection(
            customer_id=ledger["customer_id"], time_entry_ids=ledger["entry_ids"]
        )
    )


class TestPlanCompanyEdit:
    """Test the edit decision table."""

    @pytest.mark.parametrize("is_latest", [True, False])
    def test_draft_is_mutated(self, is_latest):
        """Test drafts are always edited in place."""
        assert plan_company_edit(is_latest, RevisionState.DRAFT) is EditAction.MUTATE

    def test_latest_published_gets_new_revision(self):
        """Test the current published revision is superseded."""
        assert (
            plan_company_edit(True, RevisionState.PUBLISHED) is EditAction.NEW_REVISION
        )

    def test_superseded_published_is_immutable(self):
        """Test an older published revision cannot be edited."""
        with pytest.raises(ImmutabilityViolation) as exc_info:
            plan_company_edit(False, RevisionState.PUBLISHED)

        assert exc_info.value.recovery_hint == "Edit the current company information instead"


class TestCurrentCompanyInfo:
    """Test reading the current revision."""

    def test_default_created_when_missing(self, session):
        """Test an empty database gets the default revision."""
        company_info = current_company_info(session)

        assert company_info.name == DEFAULT_COMPANY_INFO["name"]
        assert company_info.country_code == "NL"
        assert len(company_revisions(session)) == 1

    def test_existing_revision(self, session, ledger):
        """Test the latest stored revision is returned."""
        company_info = current_company_info(session)

        assert company_info.id == ledger["company_info_id"]
        assert company_info.vat_registered


class TestEditCompanyInfo:
    """Test editing revisions."""

    def test_draft_edited_in_place(self, session, ledger):
        """Test a revision no invoice uses is changed directly."""
        saved = edit_company_info(
            session, ledger["company_info_id"], {"email": "billing@stoptime.nl"}
        )

        assert saved.id == ledger["company_info_id"]
        assert saved.email == "billing@stoptime.nl"
        assert len(company_revisions(session)) == 1

    def test_published_revision_superseded(self, session, ledger, published):
        """Test editing a used revision leaves the invoice's copy intact."""
        original_id = ledger["company_info_id"]
        saved = edit_company_info(session, original_id, {"name": "Stop Time Holding BV"})

        assert saved.id != original_id
        assert saved.original_id == original_id
        assert saved.name == "Stop Time Holding BV"
        assert saved.vatno == "NL001234567B01"

        revisions = company_revisions(session)
        assert [r.id for r in revisions] == [original_id, saved.id]
        assert revisions[0].name == "Stop Time BV"

        invoice = get_invoice(session, published.number)
        assert invoice.company_info.name == "Stop Time BV"
        assert current_company_info(session).id == saved.id

    @pytest.mark.parametrize("changes", [{}, {"name": "Stop Time BV"}])
    def test_edit_without_changes_keeps_revision(
        self, session, ledger, published, changes
    ):
        """Test an edit that changes nothing does not add a revision."""
        saved = edit_company_info(session, ledger["company_info_id"], changes)

        assert saved.id == ledger["company_info_id"]
        assert len(company_revisions(session)) == 1

    def test_new_revision_is_a_draft(self, session, ledger, published):
        """Test the superseding revision can be edited again in place."""
        first = edit_company_info(session, ledger["company_info_id"], {"cell": "06"})
        second = edit_company_info(session, first.id, {"cell": "0612345678"})

        assert second.id == first.id
        assert second.cell == "0612345678"

    def test_superseded_revision_rejected(self, session, ledger, published):
        """Test the old published revision can no longer be edited."""
        edit_company_info(session, ledger["company_info_id"], {"cell": "06"})

        with pytest.raises(ImmutabilityViolation):
            edit_company_info(session, ledger["company_info_id"], {"cell": "07"})

    def test_clearing_vat_number(self, session, ledger):
        """Test an optional field can be cleared."""
        saved = edit_company_info(session, ledger["company_info_id"], {"vatno": None})

        assert saved.vatno is None
        assert not saved.vat_registered

    def test_unknown_field_rejected(self, session, ledger):
        """Test fields outside the company block are refused."""
        with pytest.raises(BillingValidationError) as exc_info:
            edit_company_info(session, ledger["company_info_id"], {"colour": "red"})

        assert "colour" in exc_info.value.fields

    def test_empty_name_rejected(self, session, ledger):
        """Test the company name cannot be cleared."""
        with pytest.raises(BillingValidationError) as exc_info:
            edit_company_info(session, ledger["company_info_id"], {"name": None})

        assert "name" in exc_info.value.fields

    def test_unknown_revision(self, session):
        """Test editing a revision that does not exist."""
        with pytest.raises(BillingValidationError) as exc_info:
            edit_company_info(session, 999, {"name": "Nobody"})

        assert exc_info.value.fields == {"revision_id": "does not exist"}
