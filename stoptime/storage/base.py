"""Database engine, session factory and transaction scope."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given database URL.

    SQLite connections are shared across threads and have foreign key
    enforcement switched on. In-memory SQLite databases use a single static
    connection so that every session sees the same data.

    Args:
        database_url: SQLAlchemy database URL
        echo: Whether to log emitted SQL

    Returns:
        Configured SQLAlchemy engine
    """
    kwargs = {"echo": echo, "pool_pre_ping": True}
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if is_sqlite:

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    # Register the records on the metadata
    from stoptime.storage import records  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database schema ready on {engine.url.render_as_string()}")


def create_session_factory(
    database_url: Optional[str] = None, engine: Optional[Engine] = None
) -> sessionmaker:
    """Create a session factory bound to an engine.

    Args:
        database_url: Database URL (used when no engine is given)
        engine: Existing engine to bind to

    Returns:
        sessionmaker producing non-autoflushing sessions

    Raises:
        ValueError: If neither a URL nor an engine is given
    """
    if engine is None:
        if database_url is None:
            raise ValueError("Either database_url or engine must be given")
        engine = create_db_engine(database_url)

    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations.

    Commits when the block completes, rolls back and re-raises on any
    exception, and always closes the session.

    Example:
        with session_scope(factory) as session:
            create_customer(session, name="Acme Corp")
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
