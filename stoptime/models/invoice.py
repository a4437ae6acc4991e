"""Invoice data models.

This module defines the Invoice aggregate (as loaded from storage, with its
billed tasks, customer and pinned company revision) and InvoiceSelection,
the request to build a new invoice from unbilled work.
"""

import datetime as dt
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from stoptime.models.base import BaseDataModel
from stoptime.models.company_info import CompanyInfo
from stoptime.models.customer import Customer
from stoptime.models.task import Task


class Invoice(BaseDataModel):
    """Represents an issued invoice.

    Totals, VAT breakdown and period are not attributes of the invoice;
    they are computed from the attached tasks by the invoice calculator.

    Attributes:
        id: Storage id
        number: Unique invoice number (YYYYSS)
        customer_id: Id of the billed customer
        company_info_id: Id of the pinned company revision
        paid: Whether the invoice has been paid
        include_specification: Whether to print a time specification
        created_at: Creation timestamp (invoice date)
        tasks: Tasks billed on this invoice
        customer: The billed customer
        company_info: The pinned company revision
    """

    id: Optional[int] = None
    number: int = Field(..., gt=0, description="Invoice number (YYYYSS)")
    customer_id: int
    company_info_id: Optional[int] = None
    paid: bool = False
    include_specification: bool = False
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    tasks: List[Task] = Field(default_factory=list)
    customer: Optional[Customer] = None
    company_info: Optional[CompanyInfo] = None


class InvoiceSelection(BaseDataModel):
    """Selection of unbilled work to build an invoice from.

    Attributes:
        customer_id: Customer to invoice
        time_entry_ids: Selected time entries of hourly-rate tasks
        task_ids: Selected fixed-cost tasks
        comments: Invoice comment per task id (defaults to the task name)

    Example:
        >>> selection = InvoiceSelection(customer_id=1, time_entry_ids=[3, 3, 4])
        >>> selection.time_entry_ids
        [3, 4]
    """

    customer_id: int
    time_entry_ids: List[int] = Field(default_factory=list)
    task_ids: List[int] = Field(default_factory=list)
    comments: Dict[int, str] = Field(default_factory=dict)

    @field_validator("time_entry_ids", "task_ids")
    @classmethod
    def deduplicate(cls, v: List[int]) -> List[int]:
        """Drop repeated ids while keeping the selection order."""
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_not_empty(self) -> "InvoiceSelection":
        """Validate that something is selected.

        Raises:
            ValueError: If neither time entries nor tasks are selected
        """
        if not self.time_entry_ids and not self.task_ids:
            raise ValueError("select at least one time entry or fixed-cost task")
        return self

    def comment_for(self, task: Task) -> str:
        """Invoice comment for a task, falling back to its name."""
        comment = self.comments.get(task.id) if task.id is not None else None
        if comment and comment.strip():
            return comment.strip()
        return task.name
