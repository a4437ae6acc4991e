"""Data models for the billing engine.

This package contains Pydantic models for all business entities:
- BaseDataModel: Base class with common configuration
- Customer: Customer with default hourly rate
- Task: Hourly-rate or fixed-cost unit of work
- TimeEntry: Single span of registered time
- Invoice: Issued invoice with its billed tasks
- InvoiceSelection: Request to build an invoice
- CompanyInfo: Revision of the issuer's company details
"""

from stoptime.models.base import BaseDataModel
from stoptime.models.company_info import CompanyInfo, CompanyInfoUpdate
from stoptime.models.customer import Customer
from stoptime.models.invoice import Invoice, InvoiceSelection
from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry

__all__ = [
    "BaseDataModel",
    "CompanyInfo",
    "CompanyInfoUpdate",
    "Customer",
    "Invoice",
    "InvoiceSelection",
    "Task",
    "TimeEntry",
]
