"""Update check: look for newer versions, add-ons and better releases.

For every acquired game whose update policy is not ``ignore``, the feed is
searched by title and each result is classified:

- ``dlc``: add-on content for the game
- ``version``: a newer version than the installed one (or any versioned
  release when the installed version is unknown)
- ``better_release``: same game in a higher quality tier

Version bumps are confirmed against the metadata service when one is
configured: a release that names a different, longer title (a sequel, a
spin-off) is not an update of this game.
"""

import threading
from typing import Dict, List, Optional, Sequence

from gamewatch.adapters.base import CatalogStore, MetadataClient, ReleaseFeedClient
from gamewatch.adapters.exceptions import CollaboratorConnectionError, CollaboratorError
from gamewatch.config.models import AppConfig, JobId
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.dedup import DedupStore
from gamewatch.domain.models import (
    CatalogEntry,
    MetadataMatch,
    ReleaseCandidate,
    UpdatePolicy,
    UpdateRecord,
    UpdateType,
)
from gamewatch.logging import get_logger
from gamewatch.logging.context import log_context
from gamewatch.matching.models import MatchResult
from gamewatch.matching.normalize import normalize_title
from gamewatch.matching.quality import is_better_quality
from gamewatch.matching.scoring import ReleaseScorer
from gamewatch.matching.versions import is_newer_version
from gamewatch.scheduler.health import ConnectionHealth
from gamewatch.scheduler.singleflight import SingleFlightGroup

from .base import Job
from .models import JobRunSummary

logger = get_logger(__name__, component="update_check")


def determine_update_type(result: MatchResult, entry: CatalogEntry) -> Optional[UpdateType]:
    """Classify a scored release relative to what is installed.

    Checked in order: add-on content, newer version, versioned release with
    nothing known installed, better quality tier. None when the release is
    none of these.
    """
    if result.is_dlc:
        return UpdateType.DLC
    if result.version:
        if not entry.installed_version:
            return UpdateType.VERSION
        if is_newer_version(result.version, entry.installed_version):
            return UpdateType.VERSION
    if is_better_quality(result.quality, entry.installed_quality):
        return UpdateType.BETTER_RELEASE
    return None


def names_other_title(
    release: ReleaseCandidate, entry: CatalogEntry, matches: Sequence[MetadataMatch]
) -> Optional[str]:
    """Metadata title, other than the entry's own, that the release names.

    Only titles longer than the entry's are considered: "Divinity Original Sin
    2 v3.6" names "Divinity: Original Sin 2", not "Divinity: Original Sin".
    """
    release_normalized = f" {normalize_title(release.title)} "
    catalog_normalized = normalize_title(entry.title)
    for match in matches:
        other = normalize_title(match.title)
        if other == catalog_normalized or len(other) <= len(catalog_normalized):
            continue
        if f" {other} " in release_normalized:
            return match.title
    return None


class UpdateCheck(Job):
    """The ``update_check`` job."""

    job_id = JobId.UPDATE_CHECK.value

    def __init__(
        self,
        settings: RuntimeSettings,
        feed: ReleaseFeedClient,
        catalog: CatalogStore,
        metadata: Optional[MetadataClient] = None,
        scorer: Optional[ReleaseScorer] = None,
        health: Optional[ConnectionHealth] = None,
    ):
        super().__init__(settings)
        self.feed = feed
        self.catalog = catalog
        self.metadata = metadata
        self.scorer = scorer or ReleaseScorer()
        self.health = health or ConnectionHealth(
            feed.name,
            quiet_window_seconds=settings.current().download.quiet_window_seconds,
        )
        self._flight = SingleFlightGroup()
        self._dedup: Dict[int, DedupStore] = {}
        self._dedup_lock = threading.Lock()

    def _run(self, config: AppConfig, summary: JobRunSummary) -> None:
        self.feed.require_configured()

        entries = [
            entry for entry in self.catalog.list_acquired()
            if entry.update_policy != UpdatePolicy.IGNORE
        ]
        summary.increment("entries", len(entries))
        if not entries:
            return

        metadata = self._prefetch_metadata(entries, config)

        for entry in entries:
            with log_context(entry_id=entry.id):
                try:
                    found = self._flight.do(
                        entry.id,
                        lambda entry=entry: self._check(entry, config, metadata.get(entry.title)),
                    )
                except CollaboratorConnectionError as e:
                    summary.add_error(f"entry:{entry.id}", e)
                    continue
                except CollaboratorError as e:
                    summary.add_error(f"entry:{entry.id}", e)
                    logger.error(
                        f"Update check for '{entry.title}' failed: {e}",
                        extra={"event": "update_check.entry.failed", "entry_id": entry.id},
                    )
                    continue
                except Exception as e:
                    summary.add_error(f"entry:{entry.id}", e)
                    logger.error(
                        f"Unexpected error checking '{entry.title}' for updates: {e}",
                        extra={"event": "update_check.entry.failed", "entry_id": entry.id},
                        exc_info=True,
                    )
                    continue
            summary.increment("updates_found", len(found))

    def check_entry(self, entry_id: int) -> List[UpdateRecord]:
        """Check one acquired entry now, outside the schedule.

        Concurrent calls for the same entry (or a call overlapping the
        scheduled run's turn for it) share one check and its result.

        Raises:
            KeyError: ``entry_id`` is not an acquired entry
            CollaboratorError: The feed or the catalog store failed
        """
        config = self.settings.current()
        self.feed.require_configured()

        entry = next((e for e in self.catalog.list_acquired() if e.id == entry_id), None)
        if entry is None:
            raise KeyError(f"No acquired catalog entry with id {entry_id}")

        def _check_one() -> List[UpdateRecord]:
            metadata = self._prefetch_metadata([entry], config)
            return self._check(entry, config, metadata.get(entry.title))

        with log_context(entry_id=entry_id, trigger="manual"):
            return self._flight.do(entry_id, _check_one)

    def _prefetch_metadata(
        self, entries: Sequence[CatalogEntry], config: AppConfig
    ) -> Dict[str, List[MetadataMatch]]:
        """Metadata search results per entry title; empty when verification is off."""
        if self.metadata is None or not config.updates.verify_with_metadata:
            return {}

        def _progress(completed: int, total: int, query: str) -> None:
            logger.debug(
                f"Metadata lookup {completed}/{total}",
                extra={"event": "update_check.metadata.progress", "completed": completed, "total": total},
            )

        try:
            return self.metadata.search_batch([entry.title for entry in entries], on_progress=_progress)
        except CollaboratorError as e:
            logger.warning(
                f"Metadata lookup failed, version updates will not be verified: {e}",
                extra={"event": "update_check.metadata.failed", "error_type": type(e).__name__},
            )
            return {}

    def _dedup_for(self, entry_id: int, config: AppConfig) -> DedupStore:
        with self._dedup_lock:
            store = self._dedup.get(entry_id)
            if store is None:
                store = DedupStore(
                    max_processed=config.dedup.max_processed,
                    max_age_seconds=config.dedup.max_age_seconds,
                )
                self._dedup[entry_id] = store
            return store

    def _check(
        self,
        entry: CatalogEntry,
        config: AppConfig,
        metadata_matches: Optional[List[MetadataMatch]],
    ) -> List[UpdateRecord]:
        try:
            releases = self.feed.search(entry.title)
        except CollaboratorConnectionError as e:
            self.health.record_failure(e)
            raise
        self.health.record_success()

        dedup = self._dedup_for(entry.id, config)
        titles_seen = set()
        found: List[UpdateRecord] = []

        for release in releases:
            if dedup.has(release.guid):
                continue

            title_key = normalize_title(release.title)
            if title_key in titles_seen:
                dedup.mark_seen(release.guid)
                continue
            titles_seen.add(title_key)

            record = self._classify(release, entry, metadata_matches)
            stored = record is not None and self.catalog.record_update(record)
            # A failed record_update leaves the GUID unmarked.
            dedup.mark_seen(release.guid)
            if stored:
                found.append(record)
                logger.info(
                    f"Found {record.update_type} update for '{entry.title}': {release.title}",
                    extra={
                        "event": "update_check.update_found",
                        "entry_id": entry.id,
                        "update_type": record.update_type,
                        "version": record.version,
                    },
                )

        return found

    def _classify(
        self,
        release: ReleaseCandidate,
        entry: CatalogEntry,
        metadata_matches: Optional[List[MetadataMatch]],
    ) -> Optional[UpdateRecord]:
        """The update ``release`` represents for ``entry``, or None."""
        result = self.scorer.evaluate(release, entry)
        if result.is_low_confidence:
            return None

        update_type = determine_update_type(result, entry)
        if update_type is None:
            return None

        if update_type == UpdateType.VERSION and metadata_matches:
            other = names_other_title(release, entry, metadata_matches)
            if other is not None:
                logger.info(
                    f"'{release.title}' is a release of '{other}', not an update",
                    extra={"event": "update_check.rejected", "guid": release.guid, "other_title": other},
                )
                return None

        return UpdateRecord(
            entry_id=entry.id,
            update_type=update_type,
            title=release.title,
            version=result.version,
            size=release.size or None,
            quality=result.quality,
            seeders=release.seeders,
            download_url=release.download_url,
            indexer=release.indexer or None,
        )
