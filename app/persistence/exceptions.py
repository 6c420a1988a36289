"""Persistence layer exceptions.

Every error raised by the database module and the repositories derives from
PersistenceError, so the result sink and the CLI can catch them in one place.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialized or used.

    Examples:
    - Malformed DATABASE_URL
    - Database directory not writable
    - get_session() called before init_database()
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when a lookup that requires a row finds none."""

    pass


class DataIntegrityError(PersistenceError):
    """Raised on a constraint violation, e.g. a second summary for one run."""

    pass
