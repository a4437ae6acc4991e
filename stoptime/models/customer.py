"""Customer data model."""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union

from pydantic import Field, field_validator

from stoptime.models.base import BaseDataModel


class Customer(BaseDataModel):
    """Represents a customer that tasks are performed for.

    Attributes:
        id: Storage id (None until persisted)
        name: Full (company) name
        short_name: Short name used in overviews
        address_street: Street address
        address_postal_code: Postal code
        address_city: City or town
        email: Email address
        phone: Phone number
        financial_contact: Person invoices are addressed to
        hourly_rate: Default hourly rate for new tasks
        time_specification: Whether invoices include a time specification

    Example:
        >>> customer = Customer(name="Acme Corp", hourly_rate="65.00")
        >>> customer.hourly_rate
        Decimal('65.00')
    """

    id: Optional[int] = None
    name: str = Field(..., min_length=1, description="Customer name")
    short_name: Optional[str] = None
    address_street: Optional[str] = None
    address_postal_code: Optional[str] = None
    address_city: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    financial_contact: Optional[str] = None
    hourly_rate: Decimal = Field(..., ge=0, description="Default hourly rate")
    time_specification: bool = Field(
        False, description="Include a time specification on invoices"
    )
    created_at: Optional[dt.datetime] = None

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Union[str, int, float, Decimal]) -> Decimal:
        if isinstance(v, Decimal):
            return v
        try:
            return Decimal(str(v))
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ValueError(f"Cannot convert {v} to Decimal: {e}")

    @property
    def display_short_name(self) -> str:
        return self.short_name or self.name
