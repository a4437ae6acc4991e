"""Database access for CLI commands."""

from sqlalchemy.orm import sessionmaker

from stoptime.config.settings import StopTimeConfig
from stoptime.storage.base import create_db_engine, create_schema, create_session_factory


def open_session_factory(config: StopTimeConfig) -> sessionmaker:
    """Create a session factory for the configured database.

    Missing tables are created, so every command works on a fresh database.
    """
    engine = create_db_engine(config.database_url, echo=False)
    create_schema(engine)
    return create_session_factory(engine=engine)
