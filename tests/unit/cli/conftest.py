"""Fixtures for CLI tests: a file database the commands can open."""

import pytest
from click.testing import CliRunner

from stoptime.config.logging_config import reset_logging
from stoptime.storage.base import create_db_engine, create_schema, create_session_factory


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def database_url(tmp_path, monkeypatch, mock_env):
    """Point the CLI settings at a SQLite file and document dir under tmp_path."""
    url = f"sqlite:///{tmp_path / 'stoptime.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("DOCUMENT_DIR", str(tmp_path / "invoices"))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    return url


@pytest.fixture
def session_factory(database_url):
    """Session factory on the same file database the CLI opens."""
    engine = create_db_engine(database_url)
    create_schema(engine)
    yield create_session_factory(engine=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """Drop the handlers the CLI installs on the runner's streams."""
    yield
    reset_logging()
