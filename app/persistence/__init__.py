"""Persistence layer for emitted contacts and run summaries (SQLAlchemy).

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ContactRepository: emitted contact records
    - RunSummaryRepository: one summary row per run

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from app.persistence import init_database, get_session, ContactRepository
    >>> init_database("sqlite:///./data/contacts.db")
    >>> with get_session() as session:
    ...     records = ContactRepository(session).get_by_run(run_id)
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import ContactRepository, RunSummaryRepository

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "ContactRepository",
    "RunSummaryRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
