"""
Billing services.

This package provides the operations on stored data:
- Ledger of customers, tasks and time entries
- Invoice numbering and invoice building (with retries on number conflicts)
- Invoice lifecycle (payment)
- Company profile history
"""

from .error_classifier import ErrorClassifier, ErrorType
from .invoice_builder import InvoiceBuilder
from .invoice_numbering import invoice_sequence, invoice_year, next_invoice_number
from .retry_handler import RetryExhaustedException, RetryHandler

__all__ = [
    "ErrorClassifier",
    "ErrorType",
    "InvoiceBuilder",
    "RetryExhaustedException",
    "RetryHandler",
    "invoice_sequence",
    "invoice_year",
    "next_invoice_number",
]
