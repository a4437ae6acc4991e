"""Unit tests for the engine, schema and transaction scope."""

from decimal import Decimal

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from stoptime.storage.base import (
    create_db_engine,
    create_schema,
    create_session_factory,
    session_scope,
)
from stoptime.storage.records import CustomerRecord, TaskRecord


@pytest.fixture
def engine():
    """In-memory engine with the schema created."""
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


class TestSchema:
    """Test schema creation and constraints."""

    def test_tables_created(self, engine):
        """Test every record has a table."""
        tables = set(inspect(engine).get_table_names())
        assert {"customers", "tasks", "time_entries", "invoices", "company_info"} <= tables

    def test_create_schema_is_repeatable(self, engine):
        """Test creating the schema twice does not fail."""
        create_schema(engine)

    def test_billing_mode_check_constraint(self, engine):
        """Test the database refuses tasks with both billing modes."""
        factory = create_session_factory(engine=engine)
        with pytest.raises(IntegrityError):
            with session_scope(factory) as session:
                customer = CustomerRecord(name="Acme", hourly_rate=Decimal("50"))
                session.add(
                    TaskRecord(
                        customer=customer,
                        name="Both",
                        fixed_cost=Decimal("1"),
                        hourly_rate=Decimal("1"),
                    )
                )

    def test_foreign_keys_enforced(self, engine):
        """Test SQLite foreign keys are switched on."""
        factory = create_session_factory(engine=engine)
        with pytest.raises(IntegrityError):
            with session_scope(factory) as session:
                session.add(TaskRecord(customer_id=999, name="Orphan", hourly_rate=1))


class TestSessionScope:
    """Test commit and rollback behaviour."""

    def test_commits_on_success(self, engine):
        """Test changes are visible in a later session."""
        factory = create_session_factory(engine=engine)
        with session_scope(factory) as session:
            session.add(CustomerRecord(name="Acme", hourly_rate=Decimal("50")))

        with session_scope(factory) as session:
            assert session.query(CustomerRecord).count() == 1

    def test_rolls_back_on_error(self, engine):
        """Test an exception discards the changes and propagates."""
        factory = create_session_factory(engine=engine)
        with pytest.raises(RuntimeError):
            with session_scope(factory) as session:
                session.add(CustomerRecord(name="Acme", hourly_rate=Decimal("50")))
                session.flush()
                raise RuntimeError("boom")

        with session_scope(factory) as session:
            assert session.query(CustomerRecord).count() == 0

    def test_factory_needs_url_or_engine(self):
        """Test a factory cannot be created from nothing."""
        with pytest.raises(ValueError):
            create_session_factory()
