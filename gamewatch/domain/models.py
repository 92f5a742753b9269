"""Core domain models.

- CatalogEntry: a game the user tracks, as seen by the engine
- ReleaseCandidate: one release offered by the indexer feed
- SubmitOptions / SubmitAcknowledgement / DownloadStatus: download client exchange
- MetadataMatch: a game known to the metadata service
- UpdateRecord: an update the engine found for an acquired game
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from gamewatch.utils.timestamps import ensure_utc


class CatalogStatus(str, Enum):
    """Lifecycle of a catalog entry."""

    WANTED = "wanted"
    ACQUIRING = "acquiring"
    ACQUIRED = "acquired"


class UpdatePolicy(str, Enum):
    """How updates for an acquired game are handled."""

    NOTIFY = "notify"
    IGNORE = "ignore"


class UpdateType(str, Enum):
    """Why a release counts as an update to an acquired game."""

    VERSION = "version"
    DLC = "dlc"
    BETTER_RELEASE = "better_release"


class DownloadState(str, Enum):
    """Coarse download state, collapsed from the client's own states."""

    QUEUED = "queued"
    DOWNLOADING = "downloading"
    COMPLETED = "completed"
    FAILED = "failed"
    MISSING = "missing"


class CatalogEntry(BaseModel):
    """A tracked game.

    The catalog store owns these records; the engine only reads them and asks
    the store for status transitions.
    """

    id: int = Field(..., description="Catalog identifier")
    title: str = Field(..., description="Display title")
    year: Optional[int] = Field(None, ge=1970, le=2100, description="Release year")
    installed_version: Optional[str] = Field(None, description="Version on disk, if known")
    installed_quality: Optional[str] = Field(None, description="Quality tier on disk")
    monitored: bool = Field(True, description="Whether the engine acts on this entry")
    status: CatalogStatus = Field(CatalogStatus.WANTED)
    update_policy: UpdatePolicy = Field(UpdatePolicy.NOTIFY)
    download_handle: Optional[str] = Field(
        None, description="Download client handle while acquiring"
    )

    model_config = {"use_enum_values": True}

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title cannot be empty or whitespace-only")
        return v.strip()


class ReleaseCandidate(BaseModel):
    """One release offered by the indexer feed. Never persisted."""

    guid: str = Field(..., min_length=1, description="Feed-unique identifier")
    title: str = Field(..., min_length=1, description="Raw release title")
    size: int = Field(0, ge=0, description="Size in bytes")
    seeders: Optional[int] = Field(None, ge=0)
    leechers: Optional[int] = Field(None, ge=0)
    indexer: str = Field("", description="Indexer that published the release")
    published_at: Optional[datetime] = Field(None, description="Publish timestamp (UTC)")
    download_url: str = Field(..., min_length=1, description="Torrent URL or magnet link")

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def size_gb(self) -> float:
        return self.size / (1024 ** 3)


class SubmitOptions(BaseModel):
    """How a release is filed with the download client."""

    category: str = "gamewatch"
    tags: List[str] = Field(default_factory=list)
    handle_tag: Optional[str] = Field(
        None, description="Unique tag the download can be found by later"
    )


class SubmitAcknowledgement(BaseModel):
    """Download client's receipt for a submitted release."""

    handle: str = Field(..., description="Identifier used to poll the download later")
    accepted: bool = True


class DownloadStatus(BaseModel):
    """Progress of one download."""

    handle: str
    state: DownloadState
    progress: float = Field(0.0, ge=0.0, le=1.0)
    name: Optional[str] = None

    model_config = {"use_enum_values": True}


class MetadataMatch(BaseModel):
    """A game returned by the metadata service for a title search."""

    title: str
    year: Optional[int] = None
    external_id: Optional[str] = None


class UpdateRecord(BaseModel):
    """An update found for an acquired game, awaiting the user's decision."""

    entry_id: int
    update_type: UpdateType
    title: str
    version: Optional[str] = None
    size: Optional[int] = None
    quality: Optional[str] = None
    seeders: Optional[int] = None
    download_url: str
    indexer: Optional[str] = None

    model_config = {"use_enum_values": True}
