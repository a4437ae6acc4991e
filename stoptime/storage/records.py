"""SQLAlchemy records for the billing engine.

Records are addressed by id; time entries point at their task and tasks at
their customer and (once billed) their invoice through foreign keys.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from stoptime.clock import local_now
from stoptime.storage.base import Base


class CustomerRecord(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    short_name = Column(String, nullable=True)
    address_street = Column(String, nullable=True)
    address_postal_code = Column(String, nullable=True)
    address_city = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    financial_contact = Column(String, nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    time_specification = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    tasks = relationship("TaskRecord", back_populates="customer", order_by="TaskRecord.id")
    invoices = relationship(
        "InvoiceRecord", back_populates="customer", order_by="InvoiceRecord.number"
    )


class TaskRecord(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "(fixed_cost IS NULL AND hourly_rate IS NOT NULL) OR "
            "(fixed_cost IS NOT NULL AND hourly_rate IS NULL)",
            name="ck_tasks_billing_mode",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)
    name = Column(String, nullable=False)
    fixed_cost = Column(Numeric(10, 2), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    vat_rate = Column(Numeric(5, 2), nullable=False, default=0)
    invoice_comment = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    customer = relationship("CustomerRecord", back_populates="tasks")
    invoice = relationship("InvoiceRecord", back_populates="tasks")
    time_entries = relationship(
        "TimeEntryRecord",
        back_populates="task",
        order_by="TimeEntryRecord.start",
    )


class TimeEntryRecord(Base):
    __tablename__ = "time_entries"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start = Column(DateTime, nullable=False)
    end = Column(DateTime, nullable=False)
    comment = Column(Text, nullable=True)
    bill = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    task = relationship("TaskRecord", back_populates="time_entries")


class InvoiceRecord(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    # Unique: a concurrent writer with the same number fails on insert
    number = Column(Integer, nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    company_info_id = Column(Integer, ForeignKey("company_info.id"), nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    include_specification = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    customer = relationship("CustomerRecord", back_populates="invoices")
    company_info = relationship("CompanyInfoRecord", back_populates="invoices")
    tasks = relationship("TaskRecord", back_populates="invoice", order_by="TaskRecord.id")


class CompanyInfoRecord(Base):
    __tablename__ = "company_info"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    contact_name = Column(String, nullable=True)
    address_street = Column(String, nullable=True)
    address_postal_code = Column(String, nullable=True)
    address_city = Column(String, nullable=True)
    country = Column(String, nullable=True)
    country_code = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    cell = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    chamber = Column(String, nullable=True)
    vatno = Column(String, nullable=True)
    accountname = Column(String, nullable=True)
    accountno = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    bic = Column(String, nullable=True)
    original_id = Column(Integer, ForeignKey("company_info.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    original = relationship("CompanyInfoRecord", remote_side=[id])
    invoices = relationship("InvoiceRecord", back_populates="company_info")
