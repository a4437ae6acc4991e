"""Writers module for invoice documents.

This module builds the printable data of an invoice and writes it through
a pluggable renderer.
"""

from stoptime.writers.invoice_document import (
    InvoiceDocument,
    InvoiceDocumentWriter,
    build_invoice_document,
    render_json,
)

__all__ = [
    "InvoiceDocument",
    "InvoiceDocumentWriter",
    "build_invoice_document",
    "render_json",
]
