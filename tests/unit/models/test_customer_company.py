"""Unit tests for the Customer and CompanyInfo models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from stoptime.models.company_info import CompanyInfo, CompanyInfoUpdate
from stoptime.models.customer import Customer


class TestCustomer:
    """Test the Customer model."""

    def test_hourly_rate_converted_to_decimal(self):
        """Test the rate is stored as a Decimal."""
        customer = Customer(name="Acme Corp", hourly_rate=65.5)
        assert customer.hourly_rate == Decimal("65.5")

    def test_time_specification_defaults_off(self):
        """Test customers do not require a specification by default."""
        assert Customer(name="Acme", hourly_rate=1).time_specification is False

    def test_display_short_name(self):
        """Test the short name is preferred when set."""
        assert Customer(name="Acme Corp", short_name="Acme", hourly_rate=1).display_short_name == "Acme"
        assert Customer(name="Acme Corp", hourly_rate=1).display_short_name == "Acme Corp"

    def test_negative_rate_rejected(self):
        """Test a negative hourly rate fails."""
        with pytest.raises(ValidationError):
            Customer(name="Acme", hourly_rate=-1)


class TestCompanyInfo:
    """Test the CompanyInfo model and its update set."""

    @pytest.mark.parametrize(
        "vatno,expected", [("NL001234567B01", True), ("", False), ("  ", False), (None, False)]
    )
    def test_vat_registered(self, vatno, expected):
        """Test VAT is charged only with a VAT number."""
        assert CompanyInfo(name="Stop Time", vatno=vatno).vat_registered is expected

    def test_update_rejects_unknown_fields(self):
        """Test that bookkeeping fields cannot be edited."""
        with pytest.raises(ValidationError):
            CompanyInfoUpdate(original_id=3)

    def test_update_rejects_clearing_name(self):
        """Test the company name cannot be cleared."""
        with pytest.raises(ValidationError):
            CompanyInfoUpdate(name=None)

    def test_update_only_dumps_given_fields(self):
        """Test unset fields are not part of the changes."""
        update = CompanyInfoUpdate(vatno="NL001", bic=None)
        assert update.model_dump(exclude_unset=True) == {"vatno": "NL001", "bic": None}
