"""Persistence for the billing engine (SQLAlchemy)."""

from stoptime.storage.base import (
    Base,
    create_db_engine,
    create_schema,
    create_session_factory,
    session_scope,
)
from stoptime.storage.repository import BillingRepository

__all__ = [
    "Base",
    "BillingRepository",
    "create_db_engine",
    "create_schema",
    "create_session_factory",
    "session_scope",
]
