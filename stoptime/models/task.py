"""Task data model.

A task is a unit of billable work for a customer. It is billed either at
an hourly rate (time entries times rate) or at a fixed cost; exactly one of
the two is set at any time.
"""

import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import Field, field_validator, model_validator

from stoptime.models.base import BaseDataModel
from stoptime.models.time_entry import TimeEntry

BillingMode = Literal["fixed_cost", "hourly_rate"]


class Task(BaseDataModel):
    """Represents a task (project) of a customer.

    Attributes:
        id: Storage id (None until persisted)
        customer_id: Id of the owning customer
        name: Task name
        fixed_cost: Fixed amount billed for the whole task
        hourly_rate: Rate billed per registered hour
        vat_rate: VAT percentage captured when the task is billed
        invoice_id: Id of the invoice the task is billed on (None if unbilled)
        invoice_comment: Name shown on the invoice once billed
        created_at: Creation timestamp
        updated_at: Last modification timestamp
        time_entries: Registered time, ordered by start

    Example:
        >>> task = Task(customer_id=1, name="Website", hourly_rate=Decimal("50"))
        >>> task.billing_mode
        'hourly_rate'
        >>> task.is_billed
        False
    """

    id: Optional[int] = None
    customer_id: int = Field(..., description="Owning customer id")
    name: str = Field(..., min_length=1, description="Task name")
    fixed_cost: Optional[Decimal] = Field(None, ge=0, description="Fixed cost")
    hourly_rate: Optional[Decimal] = Field(None, ge=0, description="Hourly rate")
    vat_rate: Decimal = Field(
        Decimal("0"), ge=0, le=100, description="VAT percentage (0-100)"
    )
    invoice_id: Optional[int] = None
    invoice_comment: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    time_entries: List[TimeEntry] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that string fields are not empty or whitespace only.

        Args:
            v: The value to validate
            info: Field validation info

        Returns:
            The validated value

        Raises:
            ValueError: If the value is empty or whitespace only
        """
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @field_validator("fixed_cost", "hourly_rate", "vat_rate", mode="before")
    @classmethod
    def convert_to_decimal(
        cls, v: Union[None, str, int, float, Decimal]
    ) -> Optional[Decimal]:
        """Convert numeric values to Decimal for precision.

        Blank strings (as submitted by forms) count as "not set".

        Args:
            v: The value to convert

        Returns:
            The value as a Decimal, or None

        Raises:
            ValueError: If the value cannot be converted to Decimal
        """
        if v is None or isinstance(v, Decimal):
            return v
        if isinstance(v, str) and not v.strip():
            return None
        try:
            return Decimal(str(v))
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ValueError(f"Cannot convert {v} to Decimal: {e}")

    @model_validator(mode="after")
    def validate_billing_mode(self) -> "Task":
        """Validate that exactly one of fixed_cost and hourly_rate is set.

        Returns:
            The validated model instance

        Raises:
            ValueError: If both or neither are set
        """
        if (self.fixed_cost is None) == (self.hourly_rate is None):
            raise ValueError(
                "exactly one of fixed_cost and hourly_rate must be set "
                f"(fixed_cost={self.fixed_cost}, hourly_rate={self.hourly_rate})"
            )
        return self

    @property
    def is_fixed_cost(self) -> bool:
        return self.fixed_cost is not None

    @property
    def billing_mode(self) -> BillingMode:
        return "fixed_cost" if self.is_fixed_cost else "hourly_rate"

    @property
    def is_billed(self) -> bool:
        return self.invoice_id is not None

    @property
    def display_name(self) -> str:
        """Name to show on an invoice: the invoice comment once billed."""
        if self.invoice_comment and self.invoice_comment.strip():
            return self.invoice_comment
        return self.name
