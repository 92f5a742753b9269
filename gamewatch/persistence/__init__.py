"""Local catalog persistence (SQLAlchemy).

Public API:
    - init_database(database_url) / get_session() / close_database() / get_engine()
    - CatalogRepository, UpdateRepository: session-bound data access
    - SqlCatalogStore: the ``CatalogStore`` used by the jobs
    - PersistenceError, DatabaseConnectionError, RecordNotFoundError, DataIntegrityError

Example usage:
    >>> from gamewatch.persistence import init_database, SqlCatalogStore
    >>> init_database("sqlite:///./data/gamewatch.db")
    >>> store = SqlCatalogStore()
    >>> store.add_entry("Baldur's Gate 3", year=2023)
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import CatalogRepository, UpdateRepository
from .store import SqlCatalogStore

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "CatalogRepository",
    "UpdateRepository",
    "SqlCatalogStore",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
