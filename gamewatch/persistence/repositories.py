"""Repositories over the catalog and updates tables.

Repositories work inside a caller-provided session and return domain models.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gamewatch.domain.models import CatalogEntry, CatalogStatus, UpdatePolicy, UpdateRecord
from gamewatch.utils.timestamps import format_timestamp, utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import CatalogEntryModel, UpdateModel

logger = logging.getLogger(__name__)


class CatalogRepository:
    """Catalog entry queries and status transitions."""

    def __init__(self, session: Session):
        self.session = session

    def add(
        self,
        title: str,
        year: Optional[int] = None,
        installed_version: Optional[str] = None,
        installed_quality: Optional[str] = None,
        status: CatalogStatus = CatalogStatus.WANTED,
        monitored: bool = True,
        update_policy: UpdatePolicy = UpdatePolicy.NOTIFY,
    ) -> CatalogEntry:
        """Insert a new catalog entry and return it with its assigned id.

        Raises:
            PersistenceError: If a database error occurs
        """
        try:
            model = CatalogEntryModel(
                title=title.strip(),
                year=year,
                installed_version=installed_version,
                installed_quality=installed_quality,
                monitored=monitored,
                status=CatalogStatus(status).value,
                update_policy=UpdatePolicy(update_policy).value,
                added_at=format_timestamp(utc_now(), include_microseconds=True),
            )
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error adding catalog entry '{title}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to add catalog entry: {e}") from e

    def get_by_id(self, entry_id: int) -> Optional[CatalogEntry]:
        try:
            model = self.session.get(CatalogEntryModel, entry_id)
            return model.to_domain() if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving catalog entry {entry_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve catalog entry: {e}") from e

    def list_by_status(self, status: CatalogStatus, monitored_only: bool = False) -> List[CatalogEntry]:
        """Entries with ``status`` in id order.

        Raises:
            PersistenceError: If a database error occurs
        """
        try:
            stmt = select(CatalogEntryModel).where(
                CatalogEntryModel.status == CatalogStatus(status).value
            )
            if monitored_only:
                stmt = stmt.where(CatalogEntryModel.monitored.is_(True))
            stmt = stmt.order_by(CatalogEntryModel.id)
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing catalog entries with status {status}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list catalog entries: {e}") from e

    def set_status(
        self,
        entry_id: int,
        status: CatalogStatus,
        changes: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> CatalogEntry:
        """Move an entry to ``status``, applying extra column ``changes``.

        Raises:
            RecordNotFoundError: If ``entry_id`` doesn't exist
            PersistenceError: If a database error occurs
        """
        try:
            model = self.session.get(CatalogEntryModel, entry_id)
            if model is None:
                raise RecordNotFoundError(f"Catalog entry {entry_id} not found")

            model.status = CatalogStatus(status).value
            model.status_changed_at = format_timestamp(timestamp or utc_now(), include_microseconds=True)
            for column, value in (changes or {}).items():
                setattr(model, column, value)

            self.session.flush()
            return model.to_domain()

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating status of catalog entry {entry_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update catalog entry: {e}") from e


class UpdateRepository:
    """Updates found for acquired entries."""

    def __init__(self, session: Session):
        self.session = session

    def exists(self, entry_id: int, download_url: str, title: str) -> bool:
        """Whether ``entry_id`` already has an update with this URL or title."""
        try:
            stmt = select(UpdateModel.id).where(
                UpdateModel.entry_id == entry_id,
                or_(UpdateModel.download_url == download_url, UpdateModel.title == title),
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking updates of entry {entry_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check updates: {e}") from e

    def add(self, update: UpdateRecord, found_at: Optional[datetime] = None) -> UpdateRecord:
        """Insert an update.

        Raises:
            DataIntegrityError: On a duplicate (entry, URL) or (entry, title)
            PersistenceError: If a database error occurs
        """
        try:
            model = UpdateModel.from_domain(update, found_at or utc_now())
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error recording update for entry {update.entry_id}: {e}")
            raise DataIntegrityError(f"Failed to record update due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error recording update for entry {update.entry_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to record update: {e}") from e

    def list_for_entry(self, entry_id: int) -> List[UpdateRecord]:
        try:
            stmt = (
                select(UpdateModel)
                .where(UpdateModel.entry_id == entry_id)
                .order_by(UpdateModel.found_at.desc(), UpdateModel.id.desc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing updates of entry {entry_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list updates: {e}") from e
