"""SQLAlchemy-backed implementation of the ``CatalogStore`` contract."""

from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gamewatch.adapters.base import CatalogStore
from gamewatch.adapters.exceptions import StorageError
from gamewatch.domain.models import CatalogEntry, CatalogStatus, UpdatePolicy, UpdateRecord
from gamewatch.logging import get_logger

from .database import get_session
from .exceptions import DataIntegrityError, PersistenceError
from .repositories import CatalogRepository, UpdateRepository

logger = get_logger(__name__, component="catalog")

SessionScope = Callable[[], AbstractContextManager[Session]]


class SqlCatalogStore(CatalogStore):
    """Catalog store on the local database.

    Every call runs in its own session scope. Persistence failures leave this
    class as ``StorageError`` so jobs only deal with the collaborator errors.
    """

    name = "catalog"

    def __init__(self, session_scope: SessionScope = get_session):
        self._session_scope = session_scope

    def _run(self, operation: str, fn: Callable[[Session], Any]) -> Any:
        try:
            with self._session_scope() as session:
                return fn(session)
        except (PersistenceError, SQLAlchemyError) as e:
            logger.error(
                f"Catalog operation '{operation}' failed: {e}",
                extra={"event": "catalog.operation.failed", "operation": operation},
            )
            raise StorageError(f"Catalog {operation} failed: {e}", collaborator=self.name) from e

    def add_entry(
        self,
        title: str,
        year: Optional[int] = None,
        installed_version: Optional[str] = None,
        installed_quality: Optional[str] = None,
        status: CatalogStatus = CatalogStatus.WANTED,
        monitored: bool = True,
        update_policy: UpdatePolicy = UpdatePolicy.NOTIFY,
    ) -> CatalogEntry:
        """Add a game to the catalog (used by the CLI seed script and tests)."""
        entry = self._run(
            "add",
            lambda session: CatalogRepository(session).add(
                title,
                year=year,
                installed_version=installed_version,
                installed_quality=installed_quality,
                status=status,
                monitored=monitored,
                update_policy=update_policy,
            ),
        )
        logger.info(
            f"Added '{entry.title}' to the catalog",
            extra={"event": "catalog.entry.added", "entry_id": entry.id, "status": entry.status},
        )
        return entry

    def get_entry(self, entry_id: int) -> Optional[CatalogEntry]:
        return self._run("get", lambda session: CatalogRepository(session).get_by_id(entry_id))

    def list_monitored_wanted(self) -> List[CatalogEntry]:
        return self._run(
            "list wanted",
            lambda session: CatalogRepository(session).list_by_status(
                CatalogStatus.WANTED, monitored_only=True
            ),
        )

    def list_acquiring(self) -> List[CatalogEntry]:
        return self._run(
            "list acquiring",
            lambda session: CatalogRepository(session).list_by_status(CatalogStatus.ACQUIRING),
        )

    def list_acquired(self) -> List[CatalogEntry]:
        return self._run(
            "list acquired",
            lambda session: CatalogRepository(session).list_by_status(CatalogStatus.ACQUIRED),
        )

    def mark_acquiring(
        self,
        entry_id: int,
        download_handle: Optional[str] = None,
        release_title: Optional[str] = None,
    ) -> None:
        self._transition(
            entry_id,
            CatalogStatus.ACQUIRING,
            {"download_handle": download_handle, "release_title": release_title},
        )

    def mark_acquired(self, entry_id: int, release_info: Optional[Dict[str, Any]] = None) -> None:
        changes: Dict[str, Any] = {"download_handle": None}
        info = release_info or {}
        if info.get("version"):
            changes["installed_version"] = info["version"]
        if info.get("quality"):
            changes["installed_quality"] = info["quality"]
        if info.get("name"):
            changes["release_title"] = info["name"]
        self._transition(entry_id, CatalogStatus.ACQUIRED, changes)

    def mark_wanted(self, entry_id: int) -> None:
        self._transition(entry_id, CatalogStatus.WANTED, {"download_handle": None})

    def _transition(self, entry_id: int, status: CatalogStatus, changes: Dict[str, Any]) -> None:
        self._run(
            f"mark {status.value}",
            lambda session: CatalogRepository(session).set_status(entry_id, status, changes),
        )
        logger.info(
            f"Catalog entry {entry_id} is now {status.value}",
            extra={"event": "catalog.entry.status_changed", "entry_id": entry_id, "status": status.value},
        )

    def record_update(self, update: UpdateRecord) -> bool:
        def _record(session: Session) -> bool:
            repo = UpdateRepository(session)
            if repo.exists(update.entry_id, update.download_url, update.title):
                return False
            repo.add(update)
            return True

        try:
            return self._run("record update", _record)
        except StorageError as e:
            # Another run recorded the same release between the check and the insert.
            if isinstance(e.__cause__, DataIntegrityError):
                return False
            raise

    def list_updates(self, entry_id: int) -> List[UpdateRecord]:
        return self._run(
            "list updates", lambda session: UpdateRepository(session).list_for_entry(entry_id)
        )
