"""Wanted search: actively look for every wanted game.

Where release sync waits for releases to show up in the feed, this job asks
the feed for each wanted title directly and grabs the first result that
clears the auto-grab thresholds.
"""

from datetime import datetime
from typing import Callable, Optional

from gamewatch.adapters.base import CatalogStore, DownloadClient, ReleaseFeedClient
from gamewatch.adapters.exceptions import CollaboratorConnectionError, CollaboratorError
from gamewatch.config.models import AppConfig, JobId
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.domain.models import CatalogEntry, DownloadState
from gamewatch.logging import get_logger
from gamewatch.logging.context import log_context
from gamewatch.matching.models import ScoredRelease
from gamewatch.matching.policy import select_first_qualifying
from gamewatch.matching.scoring import ReleaseScorer
from gamewatch.scheduler.health import ConnectionHealth
from gamewatch.utils.timestamps import utc_now

from .acquisition import Acquirer
from .base import Job
from .models import JobRunSummary

logger = get_logger(__name__, component="wanted_search")

LOST_DOWNLOAD_STATES = (DownloadState.FAILED, DownloadState.MISSING)


class WantedSearch(Job):
    """The ``wanted_search`` job."""

    job_id = JobId.WANTED_SEARCH.value

    def __init__(
        self,
        settings: RuntimeSettings,
        feed: ReleaseFeedClient,
        downloads: DownloadClient,
        catalog: CatalogStore,
        scorer: Optional[ReleaseScorer] = None,
        health: Optional[ConnectionHealth] = None,
        download_health: Optional[ConnectionHealth] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(settings)
        self.feed = feed
        self.downloads = downloads
        self.catalog = catalog
        self.scorer = scorer or ReleaseScorer()
        quiet_window = settings.current().download.quiet_window_seconds
        self.health = health or ConnectionHealth(feed.name, quiet_window_seconds=quiet_window)
        self.download_health = download_health or ConnectionHealth(
            downloads.name, quiet_window_seconds=quiet_window
        )
        self.acquirer = Acquirer(downloads, catalog, health=self.download_health)
        self._clock = clock

    def _run(self, config: AppConfig, summary: JobRunSummary) -> None:
        self.feed.require_configured()
        if not config.auto_grab.dry_run:
            self.downloads.require_configured()

        if self.downloads.is_configured():
            self._reset_failed_downloads(summary)

        for entry in self.catalog.list_monitored_wanted():
            with log_context(entry_id=entry.id):
                try:
                    self._search_entry(entry, config, summary)
                except CollaboratorConnectionError as e:
                    # Counted against the feed or the download client where it was raised.
                    summary.add_error(f"entry:{entry.id}", e)
                except CollaboratorError as e:
                    summary.add_error(f"entry:{entry.id}", e)
                    logger.error(
                        f"Search for '{entry.title}' failed: {e}",
                        extra={"event": "wanted_search.entry.failed", "entry_id": entry.id},
                    )
                except Exception as e:
                    summary.add_error(f"entry:{entry.id}", e)
                    logger.error(
                        f"Unexpected error searching for '{entry.title}': {e}",
                        extra={"event": "wanted_search.entry.failed", "entry_id": entry.id},
                        exc_info=True,
                    )

    def _reset_failed_downloads(self, summary: JobRunSummary) -> None:
        """Put entries whose download failed or vanished back to ``wanted``."""
        for entry in self.catalog.list_acquiring():
            if not entry.download_handle:
                continue
            try:
                status = self.downloads.poll_status(entry.download_handle)
            except CollaboratorConnectionError as e:
                self.download_health.record_failure(e)
                summary.add_error(f"entry:{entry.id}", e)
                continue
            except CollaboratorError as e:
                summary.add_error(f"entry:{entry.id}", e)
                continue
            except Exception as e:
                summary.add_error(f"entry:{entry.id}", e)
                logger.error(
                    f"Unexpected error polling the download of '{entry.title}': {e}",
                    extra={"event": "wanted_search.poll.failed", "entry_id": entry.id},
                    exc_info=True,
                )
                continue
            self.download_health.record_success()

            if status.state not in LOST_DOWNLOAD_STATES:
                continue
            try:
                self.catalog.mark_wanted(entry.id)
            except Exception as e:
                summary.add_error(f"entry:{entry.id}", e)
                logger.error(
                    f"Could not reset '{entry.title}' to wanted: {e}",
                    extra={"event": "wanted_search.reset.failed", "entry_id": entry.id},
                    exc_info=not isinstance(e, CollaboratorError),
                )
                continue
            summary.increment("reset")
            logger.info(
                f"Download of '{entry.title}' {status.state}, searching again",
                extra={"event": "wanted_search.entry.reset", "entry_id": entry.id, "state": status.state},
            )

    def _search_entry(self, entry: CatalogEntry, config: AppConfig, summary: JobRunSummary) -> None:
        try:
            releases = self.feed.search(entry.title)
        except CollaboratorConnectionError as e:
            self.health.record_failure(e)
            raise
        self.health.record_success()
        summary.increment("searched")
        summary.increment("fetched", len(releases))

        now = self._clock()
        candidates = []
        for release in releases:
            result = self.scorer.evaluate(release, entry, now=now)
            if result.is_dlc or result.is_low_confidence:
                continue
            candidates.append(ScoredRelease(release=release, entry=entry, result=result))

        thresholds = config.auto_grab
        choice = select_first_qualifying(candidates, thresholds.min_score, thresholds.min_seeders)
        if choice is None:
            summary.increment("not_found")
            logger.debug(
                f"No qualifying release for '{entry.title}'",
                extra={
                    "event": "wanted_search.entry.not_found",
                    "entry_id": entry.id,
                    "candidates": len(candidates),
                },
            )
            return

        summary.increment("matched")
        summary.acquisitions.append(
            self.acquirer.grab(choice, config.download.category, dry_run=thresholds.dry_run)
        )
