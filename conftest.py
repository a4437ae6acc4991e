"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from decimal import Decimal
from typing import Dict

import pytest

from stoptime.clock import FixedClock
from stoptime.config import StopTimeConfig, reload_config
from stoptime.storage.base import (
    create_db_engine,
    create_schema,
    create_session_factory,
    session_scope,
)
from stoptime.storage.records import (
    CompanyInfoRecord,
    CustomerRecord,
    TaskRecord,
    TimeEntryRecord,
)


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'DEFAULT_HOURLY_RATE': '20.00',
        'DEFAULT_VAT_RATE': '21',
        'TIME_RESOLUTION_MINUTES': '1',
        'DATABASE_URL': 'sqlite://',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'false',
        'LOG_LEVEL': 'DEBUG',
        'MAX_RETRIES': '3',
        'RETRY_DELAY': '0',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import stoptime.config.settings
    stoptime.config.settings._config = None

    yield test_env_vars

    stoptime.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> StopTimeConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen on a Monday morning in 2024."""
    return FixedClock(dt.datetime(2024, 3, 4, 10, 0))


@pytest.fixture
def session_factory(test_config):
    """Session factory on a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite://")
    create_schema(engine)
    yield create_session_factory(engine=engine)
    engine.dispose()


@pytest.fixture
def session(session_factory):
    """Session that is committed when the test completes."""
    with session_scope(session_factory) as session:
        yield session


def _entry(task, start, hours, bill=True, comment=None):
    return TimeEntryRecord(
        task=task,
        date=start.date(),
        start=start,
        end=start + dt.timedelta(hours=hours),
        bill=bill,
        comment=comment,
    )


@pytest.fixture
def ledger(session_factory):
    """Sample ledger: one customer with an hourly and a fixed-cost task.

    The hourly task (50/h, 21% VAT) has a 2h and a 3h entry; the fixed-cost
    task costs 500 at 21% VAT. A second customer owns one hourly task.
    Returns the ids of the created records.
    """
    with session_scope(session_factory) as session:
        company_info = CompanyInfoRecord(
            name="Stop Time BV",
            country="The Netherlands",
            country_code="NL",
            vatno="NL001234567B01",
            accountno="NL91ABNA0417164300",
        )
        customer = CustomerRecord(
            name="Acme Corp",
            short_name="Acme",
            hourly_rate=Decimal("50.00"),
            time_specification=True,
        )
        other = CustomerRecord(name="Globex", hourly_rate=Decimal("40.00"))
        hourly = TaskRecord(
            customer=customer,
            name="Website",
            hourly_rate=Decimal("50.00"),
            vat_rate=Decimal("21"),
            created_at=dt.datetime(2024, 1, 1, 9, 0),
            updated_at=dt.datetime(2024, 1, 1, 9, 0),
        )
        fixed = TaskRecord(
            customer=customer,
            name="Logo design",
            fixed_cost=Decimal("500.00"),
            vat_rate=Decimal("21"),
        )
        foreign = TaskRecord(
            customer=other, name="Intranet", hourly_rate=Decimal("40.00")
        )
        first = _entry(hourly, dt.datetime(2024, 1, 8, 9, 0), 2, comment="Kick-off")
        second = _entry(hourly, dt.datetime(2024, 1, 9, 13, 0), 3)
        logo_entry = _entry(fixed, dt.datetime(2024, 1, 10, 9, 0), 4)
        foreign_entry = _entry(foreign, dt.datetime(2024, 1, 11, 9, 0), 1)

        session.add_all(
            [company_info, customer, other, hourly, fixed, foreign,
             first, second, logo_entry, foreign_entry]
        )
        session.flush()

        return {
            'company_info_id': company_info.id,
            'customer_id': customer.id,
            'other_customer_id': other.id,
            'hourly_task_id': hourly.id,
            'fixed_task_id': fixed.id,
            'foreign_task_id': foreign.id,
            'entry_ids': [first.id, second.id],
            'fixed_entry_id': logo_entry.id,
            'foreign_entry_id': foreign_entry.id,
        }


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
