"""Company information (issuer profile) data model.

Company information is revisioned: every revision optionally points to the
revision it superseded. Invoices pin the revision that was current when
they were created so that they can be reproduced later.
"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator

from stoptime.models.base import BaseDataModel

# Fields an operator may change; everything else is revision bookkeeping.
EDITABLE_FIELDS = (
    "name",
    "contact_name",
    "address_street",
    "address_postal_code",
    "address_city",
    "country",
    "country_code",
    "phone",
    "cell",
    "email",
    "website",
    "chamber",
    "vatno",
    "accountname",
    "accountno",
    "bank_name",
    "bic",
)


class CompanyInfo(BaseDataModel):
    """A revision of the issuer's legal and bank details.

    Attributes:
        id: Storage id (None until persisted)
        name: Company name
        contact_name: Contact person
        chamber: Chamber of commerce registration number
        vatno: VAT registration number (blank when not VAT registered)
        accountname: Bank account holder name
        accountno: Bank account number (IBAN)
        original_id: Id of the revision this one superseded
    """

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    contact_name: Optional[str] = None
    address_street: Optional[str] = None
    address_postal_code: Optional[str] = None
    address_city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    phone: Optional[str] = None
    cell: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    chamber: Optional[str] = None
    vatno: Optional[str] = None
    accountname: Optional[str] = None
    accountno: Optional[str] = None
    bank_name: Optional[str] = None
    bic: Optional[str] = None
    original_id: Optional[int] = None
    created_at: Optional[dt.datetime] = None

    @property
    def vat_registered(self) -> bool:
        """Whether VAT is charged on invoices issued with this revision."""
        return bool(self.vatno and self.vatno.strip())


class CompanyInfoUpdate(BaseDataModel):
    """Validated set of changes to apply to a company revision.

    Only the editable fields are accepted; unknown fields are rejected.
    """

    name: Optional[str] = Field(None, min_length=1)
    contact_name: Optional[str] = None
    address_street: Optional[str] = None
    address_postal_code: Optional[str] = None
    address_city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    phone: Optional[str] = None
    cell: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    chamber: Optional[str] = None
    vatno: Optional[str] = None
    accountname: Optional[str] = None
    accountno: Optional[str] = None
    bank_name: Optional[str] = None
    bic: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        """A company name can be changed but never cleared."""
        if v is None or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()
