"""ORM models for the catalog and found updates, with domain conversions."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from gamewatch.domain.models import CatalogEntry, UpdateRecord
from gamewatch.utils.timestamps import format_timestamp

logger = logging.getLogger(__name__)

Base = declarative_base()


class CatalogEntryModel(Base):
    """ORM model for the ``catalog`` table."""

    __tablename__ = "catalog"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    year = Column(Integer, nullable=True)

    installed_version = Column(String(100), nullable=True)
    installed_quality = Column(String(50), nullable=True)
    monitored = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default="wanted")
    update_policy = Column(String(20), nullable=False, default="notify")

    download_handle = Column(String(255), nullable=True)
    release_title = Column(Text, nullable=True)

    # ISO 8601 strings
    added_at = Column(String(50), nullable=False)
    status_changed_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_catalog_status", "status", "monitored"),
    )

    def to_domain(self) -> CatalogEntry:
        return CatalogEntry(
            id=self.id,
            title=self.title,
            year=self.year,
            installed_version=self.installed_version,
            installed_quality=self.installed_quality,
            monitored=bool(self.monitored),
            status=self.status,
            update_policy=self.update_policy,
            download_handle=self.download_handle,
        )


class UpdateModel(Base):
    """ORM model for the ``updates`` table.

    One row per update found for an acquired entry. A release is recorded at
    most once per entry, by download URL and by title.
    """

    __tablename__ = "updates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(Integer, ForeignKey("catalog.id", ondelete="CASCADE"), nullable=False)
    update_type = Column(String(20), nullable=False)
    title = Column(Text, nullable=False)
    version = Column(String(100), nullable=True)
    size = Column(BigInteger, nullable=True)
    quality = Column(String(50), nullable=True)
    seeders = Column(Integer, nullable=True)
    download_url = Column(Text, nullable=False)
    indexer = Column(String(255), nullable=True)
    found_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("entry_id", "download_url", name="uq_updates_entry_url"),
        UniqueConstraint("entry_id", "title", name="uq_updates_entry_title"),
        Index("idx_updates_found_at", "found_at"),
    )

    def to_domain(self) -> UpdateRecord:
        return UpdateRecord(
            entry_id=self.entry_id,
            update_type=self.update_type,
            title=self.title,
            version=self.version,
            size=self.size,
            quality=self.quality,
            seeders=self.seeders,
            download_url=self.download_url,
            indexer=self.indexer,
        )

    @classmethod
    def from_domain(cls, update: UpdateRecord, found_at: datetime) -> "UpdateModel":
        return cls(
            entry_id=update.entry_id,
            update_type=update.update_type,
            title=update.title,
            version=update.version,
            size=update.size,
            quality=update.quality,
            seeders=update.seeders,
            download_url=update.download_url,
            indexer=update.indexer,
            found_at=_format_datetime(found_at),
        )


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return format_timestamp(dt, include_microseconds=True)


def create_schema(engine: Engine) -> None:
    """Create missing tables and indexes. Idempotent."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
