"""Unit tests for invoice documents."""

import datetime as dt
import json
from decimal import Decimal

import pytest

from stoptime.models.company_info import CompanyInfo
from stoptime.models.customer import Customer
from stoptime.models.invoice import Invoice
from stoptime.models.task import Task
from stoptime.models.time_entry import TimeEntry
from stoptime.writers.invoice_document import (
    InvoiceDocumentWriter,
    build_invoice_document,
)


def entry(day, hours, bill=True, comment=None):
    start = dt.datetime(2024, 1, day, 9, 0)
    return TimeEntry(
        date=start.date(),
        start=start,
        end=start + dt.timedelta(hours=hours),
        bill=bill,
        comment=comment,
    )


@pytest.fixture
def invoice():
    """Invoice 202401 with an hourly and a fixed-cost task."""
    website = Task(
        id=5,
        customer_id=1,
        name="Website",
        hourly_rate=Decimal("50"),
        vat_rate=Decimal("21"),
        invoice_id=1,
        invoice_comment="Website redesign",
        time_entries=[entry(8, 2, comment="Kick-off"), entry(9, 3)],
    )
    logo = Task(
        id=2,
        customer_id=1,
        name="Logo",
        fixed_cost=Decimal("500"),
        vat_rate=Decimal("21"),
        invoice_id=1,
        time_entries=[entry(11, 4), entry(12, 1, bill=False)],
    )
    return Invoice(
        id=1,
        number=202401,
        customer_id=1,
        company_info_id=1,
        include_specification=True,
        created_at=dt.datetime(2024, 1, 31, 12, 0),
        tasks=[website, logo],
        customer=Customer(id=1, name="Acme Corp", hourly_rate=Decimal("50")),
        company_info=CompanyInfo(id=1, name="Stop Time BV", vatno="NL001234567B01"),
    )


class TestBuildInvoiceDocument:
    """Test collecting printable invoice data."""

    def test_document(self, invoice):
        """Test header, lines and totals."""
        document = build_invoice_document(invoice)

        assert document.number == 202401
        assert document.date == dt.date(2024, 1, 31)
        assert document.due_date == dt.date(2024, 3, 1)
        assert document.period_start == dt.datetime(2024, 1, 8, 9, 0)
        assert document.company.name == "Stop Time BV"

        website, logo = document.lines
        assert website.description == "Website redesign"
        assert website.hours == Decimal("5.00")
        assert website.amount == Decimal("250.00")
        assert logo.hours is None
        assert logo.amount == Decimal("500.00")

        assert document.subtotal == Decimal("750.00")
        assert document.vat_summary == {Decimal("21"): Decimal("157.50")}
        assert document.total == Decimal("907.50")

    def test_specification_lists_billable_entries(self, invoice):
        """Test the time specification skips entries not meant for billing."""
        specification = build_invoice_document(invoice).specification

        website = specification[0]
        assert website.description == "Website redesign"
        assert [row.date for row in website.rows] == [
            dt.date(2024, 1, 8),
            dt.date(2024, 1, 9),
        ]
        assert website.rows[0].comment == "Kick-off"
        assert website.total_hours == Decimal("5.00")

        logo = specification[1]
        assert [row.date for row in logo.rows] == [dt.date(2024, 1, 11)]
        assert logo.total_hours == Decimal("4.00")

    def test_short_entries_totalled_before_rounding(self, invoice):
        """Test hours of short entries are summed exactly, then rounded."""
        start = dt.datetime(2024, 1, 8, 9, 0)
        invoice.tasks[0].time_entries = [
            TimeEntry(
                date=start.date(),
                start=start + dt.timedelta(hours=n),
                end=start + dt.timedelta(hours=n, minutes=10),
            )
            for n in range(3)
        ]
        document = build_invoice_document(invoice)

        website = document.specification[0]
        assert [row.hours for row in website.rows] == [Decimal("0.17")] * 3
        assert website.total_hours == Decimal("0.50")
        assert document.lines[0].hours == Decimal("0.50")
        assert document.lines[0].amount == Decimal("25.00")

    def test_no_specification_when_not_requested(self, invoice):
        """Test customers without a time specification get none."""
        invoice.include_specification = False
        assert build_invoice_document(invoice).specification is None

    def test_no_vat_without_vat_number(self, invoice):
        """Test an issuer without VAT number charges no VAT."""
        invoice.company_info = CompanyInfo(id=2, name="Stop Time")
        document = build_invoice_document(invoice)

        assert document.vat_summary == {}
        assert document.vat_total == Decimal("0.00")
        assert document.total == Decimal("750.00")

    def test_requires_customer_and_company(self, invoice):
        """Test an invoice loaded without relations is refused."""
        invoice.customer = None
        with pytest.raises(ValueError):
            build_invoice_document(invoice)


class TestInvoiceDocumentWriter:
    """Test writing documents to disk."""

    def test_write_json(self, invoice, tmp_path):
        """Test the default renderer writes JSON named after the number."""
        writer = InvoiceDocumentWriter(tmp_path / "invoices")
        path = writer.write(invoice)

        assert path == tmp_path / "invoices" / "202401.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["number"] == 202401
        assert data["customer"]["name"] == "Acme Corp"
        assert not path.with_name("202401.json.tmp").exists()

    def test_existing_document_kept(self, invoice, tmp_path):
        """Test writing again leaves an existing document alone."""
        writer = InvoiceDocumentWriter(tmp_path)
        path = writer.path_for(invoice.number)
        path.write_text("printed", encoding="utf-8")

        assert writer.write(invoice) == path
        assert path.read_text(encoding="utf-8") == "printed"

    def test_overwrite(self, invoice, tmp_path):
        """Test an existing document can be replaced explicitly."""
        writer = InvoiceDocumentWriter(tmp_path)
        writer.path_for(invoice.number).write_text("printed", encoding="utf-8")

        path = writer.write(invoice, overwrite=True)
        assert path.read_text(encoding="utf-8") != "printed"

    def test_custom_renderer(self, invoice, tmp_path):
        """Test a renderer producing bytes with its own extension."""
        writer = InvoiceDocumentWriter(
            tmp_path, renderer=lambda doc: f"%PDF {doc.number}".encode(), extension=".pdf"
        )
        path = writer.write(invoice)

        assert path.name == "202401.pdf"
        assert path.read_bytes() == b"%PDF 202401"
