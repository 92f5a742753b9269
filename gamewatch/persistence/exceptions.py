"""Persistence layer exceptions.

All of them inherit from PersistenceError. ``SqlCatalogStore`` converts them
to ``StorageError`` before they reach a job.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialised or reached.

    Examples:
    - Invalid database URL
    - Database file not accessible
    - Session requested before ``init_database``
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation targets a catalog entry that does not exist.

    Lookups that may legitimately miss return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a constraint is violated (e.g. a duplicate update record)."""

    pass
