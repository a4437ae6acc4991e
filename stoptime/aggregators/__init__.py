"""Aggregators module for reporting on invoices and unbilled work.

This module builds pandas DataFrames from invoices and tasks for the
overview and reporting commands.
"""

from stoptime.aggregators.invoice_aggregator import InvoiceAggregator

__all__ = ["InvoiceAggregator"]
