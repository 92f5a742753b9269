"""Run summaries produced by the job bodies."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from gamewatch.utils.timestamps import utc_now


@dataclass
class ItemError:
    """A failure isolated to one source or one catalog entry.

    Attributes:
        subject: What failed, e.g. ``"query:baldur's gate"`` or ``"entry:12"``
        error_type: Exception class name
        message: Exception message
    """

    subject: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, subject: str, error: BaseException) -> "ItemError":
        return cls(subject=subject, error_type=type(error).__name__, message=str(error))


@dataclass
class AcquisitionRequest:
    """A release chosen for a catalog entry.

    ``submitted`` is False in dry-run mode, in which case ``handle`` is None
    and the entry stays ``wanted``.
    """

    entry_id: int
    entry_title: str
    guid: str
    release_title: str
    download_url: str
    score: int
    seeders: Optional[int] = None
    handle: Optional[str] = None
    submitted: bool = False


@dataclass
class ReviewItem:
    """A matched release that did not clear the auto-grab thresholds."""

    entry_id: int
    guid: str
    release_title: str
    score: int
    seeders: Optional[int] = None


@dataclass
class JobRunSummary:
    """
    Outcome of one job run.

    Attributes:
        job_id: Job identifier (``release_sync``, ``wanted_search``, ...)
        started_at: UTC start timestamp
        finished_at: UTC end timestamp, set by ``finish()``
        counts: Named counters, e.g. ``fetched``, ``seen``, ``matched``
        acquisitions: Releases grabbed (or that would have been, in dry-run)
        review: Matches left for the user to decide
        errors: Per-source and per-item failures; the run carried on past them
        dry_run: Whether acquisitions were only logged
        disabled: The job's schedule is disabled and the run did nothing
    """

    job_id: str
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None
    counts: Dict[str, int] = field(default_factory=dict)
    acquisitions: List[AcquisitionRequest] = field(default_factory=list)
    review: List[ReviewItem] = field(default_factory=list)
    errors: List[ItemError] = field(default_factory=list)
    dry_run: bool = False
    disabled: bool = False

    def increment(self, name: str, amount: int = 1) -> None:
        self.counts[name] = self.counts.get(name, 0) + amount

    def count(self, name: str) -> int:
        return self.counts.get(name, 0)

    def add_error(self, subject: str, error: BaseException) -> ItemError:
        item = ItemError.from_exception(subject, error)
        self.errors.append(item)
        return item

    def finish(self) -> "JobRunSummary":
        self.finished_at = utc_now()
        return self

    @property
    def had_errors(self) -> bool:
        return bool(self.errors)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def as_log_fields(self) -> Dict[str, object]:
        """Flat fields for the ``job.run.summary`` log line."""
        fields: Dict[str, object] = dict(self.counts)
        fields.update(
            {
                "acquisitions": len(self.acquisitions),
                "review": len(self.review),
                "errors": len(self.errors),
                "dry_run": self.dry_run,
                "duration_seconds": round(self.duration_seconds, 3),
            }
        )
        return fields
