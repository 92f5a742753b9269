"""Release feed sync: match new feed releases against the wanted list.

Each run reads the recent-releases feed plus the saved queries, skips GUIDs
already processed, picks the best-matching wanted entry for every new
release and either grabs it (auto-grab thresholds met) or leaves it for
review. Add-on content is never grabbed for a base game.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from gamewatch.adapters.base import CatalogStore, DownloadClient, ReleaseFeedClient
from gamewatch.adapters.exceptions import CollaboratorConnectionError, CollaboratorError
from gamewatch.config.models import AppConfig, JobId
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.dedup import DedupStore
from gamewatch.domain.models import CatalogEntry, ReleaseCandidate
from gamewatch.logging import get_logger
from gamewatch.matching.policy import should_auto_grab
from gamewatch.matching.scoring import ReleaseScorer
from gamewatch.scheduler.health import ConnectionHealth
from gamewatch.utils.timestamps import utc_now

from .acquisition import Acquirer
from .base import Job
from .models import JobRunSummary, ReviewItem

logger = get_logger(__name__, component="release_sync")

RECENT_SOURCE = "recent"


class ReleaseFeedSync(Job):
    """The ``release_sync`` job."""

    job_id = JobId.RELEASE_SYNC.value

    def __init__(
        self,
        settings: RuntimeSettings,
        feed: ReleaseFeedClient,
        downloads: DownloadClient,
        catalog: CatalogStore,
        dedup: Optional[DedupStore] = None,
        scorer: Optional[ReleaseScorer] = None,
        health: Optional[ConnectionHealth] = None,
        download_health: Optional[ConnectionHealth] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(settings)
        config = settings.current()
        self.feed = feed
        self.downloads = downloads
        self.catalog = catalog
        if dedup is None:
            dedup = DedupStore(
                max_processed=config.dedup.max_processed,
                max_age_seconds=config.dedup.max_age_seconds,
            )
        self.dedup = dedup
        self.scorer = scorer or ReleaseScorer()
        self.health = health or ConnectionHealth(
            feed.name, quiet_window_seconds=config.download.quiet_window_seconds
        )
        self.download_health = download_health or ConnectionHealth(
            downloads.name, quiet_window_seconds=config.download.quiet_window_seconds
        )
        self.acquirer = Acquirer(downloads, catalog, health=self.download_health)
        self._clock = clock

    def clear_processed_cache(self) -> int:
        """Forget every processed GUID so the next run re-evaluates the feed."""
        cleared = len(self.dedup)
        self.dedup.clear()
        logger.info(
            f"Cleared {cleared} processed releases",
            extra={"event": "release_sync.cache.cleared", "cleared": cleared},
        )
        return cleared

    def _run(self, config: AppConfig, summary: JobRunSummary) -> None:
        self.feed.require_configured()
        if not config.auto_grab.dry_run:
            self.downloads.require_configured()

        purged = self.dedup.purge_stale()
        if purged:
            summary.increment("purged", purged)

        releases = self._collect(config, summary)
        if not releases:
            return

        wanted = self.catalog.list_monitored_wanted()
        now = self._clock()

        for release in releases:
            if self.dedup.has(release.guid):
                summary.increment("seen")
                continue
            self.dedup.mark_seen(release.guid)
            summary.increment("new")

            if not wanted:
                continue

            try:
                self._process(release, wanted, config, summary, now)
            except CollaboratorConnectionError as e:
                # Already counted against the download client's health.
                summary.add_error(f"release:{release.guid}", e)
            except CollaboratorError as e:
                summary.add_error(f"release:{release.guid}", e)
                logger.error(
                    f"Failed to process release '{release.title}': {e}",
                    extra={"event": "release_sync.release.failed", "guid": release.guid},
                )
            except Exception as e:
                summary.add_error(f"release:{release.guid}", e)
                logger.error(
                    f"Unexpected error processing release '{release.title}': {e}",
                    extra={"event": "release_sync.release.failed", "guid": release.guid},
                    exc_info=True,
                )

    def _collect(self, config: AppConfig, summary: JobRunSummary) -> List[ReleaseCandidate]:
        """Recent feed plus saved queries, first occurrence of each GUID kept."""
        sources: List = [(RECENT_SOURCE, self.feed.fetch_recent_releases)]
        for query in config.release_sync.queries:
            sources.append(
                (f"query:{query}", lambda q=query: self.feed.fetch_configured_query_releases(q))
            )

        collected: Dict[str, ReleaseCandidate] = {}
        for source, fetch in sources:
            try:
                releases = fetch()
            except CollaboratorError as e:
                summary.add_error(source, e)
                if isinstance(e, CollaboratorConnectionError):
                    self.health.record_failure(e)
                else:
                    logger.error(
                        f"Feed source '{source}' failed: {e}",
                        extra={"event": "release_sync.source.failed", "source": source},
                    )
                continue
            except Exception as e:
                summary.add_error(source, e)
                logger.error(
                    f"Unexpected error reading feed source '{source}': {e}",
                    extra={"event": "release_sync.source.failed", "source": source},
                    exc_info=True,
                )
                continue

            self.health.record_success()
            summary.increment("fetched", len(releases))
            for release in releases:
                collected.setdefault(release.guid, release)

        return list(collected.values())

    def _process(
        self,
        release: ReleaseCandidate,
        wanted: List[CatalogEntry],
        config: AppConfig,
        summary: JobRunSummary,
        now: datetime,
    ) -> None:
        choice = self.scorer.best_match(release, wanted, now=now)
        if choice is None:
            return

        if choice.result.is_dlc:
            summary.increment("dlc_skipped")
            logger.debug(
                f"Skipping add-on release '{release.title}'",
                extra={"event": "release_sync.dlc_skipped", "guid": release.guid, "entry_id": choice.entry.id},
            )
            return

        summary.increment("matched")
        thresholds = config.auto_grab
        if not should_auto_grab(choice.score, release.seeders, thresholds.min_score, thresholds.min_seeders):
            summary.review.append(
                ReviewItem(
                    entry_id=choice.entry.id,
                    guid=release.guid,
                    release_title=release.title,
                    score=choice.score,
                    seeders=release.seeders,
                )
            )
            logger.info(
                f"Match for '{choice.entry.title}' below auto-grab thresholds",
                extra={
                    "event": "release_sync.review",
                    "entry_id": choice.entry.id,
                    "guid": release.guid,
                    "score": choice.score,
                    "seeders": release.seeders,
                },
            )
            return

        request = self.acquirer.grab(choice, config.download.category, dry_run=thresholds.dry_run)
        summary.acquisitions.append(request)
        # One grab per entry per run.
        wanted[:] = [entry for entry in wanted if entry.id != choice.entry.id]
