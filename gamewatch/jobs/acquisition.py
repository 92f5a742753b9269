"""Submitting a chosen release and moving its entry to ``acquiring``."""

from typing import Optional
from uuid import uuid4

from gamewatch.adapters.base import CatalogStore, DownloadClient
from gamewatch.adapters.exceptions import CollaboratorConnectionError
from gamewatch.domain.models import SubmitOptions
from gamewatch.logging import get_logger
from gamewatch.matching.models import ScoredRelease
from gamewatch.scheduler.health import ConnectionHealth

from .models import AcquisitionRequest

logger = get_logger(__name__, component="acquisition")

SERVICE_TAG = "gamewatch"


class Acquirer:
    """Hands releases to the download client on behalf of the jobs."""

    def __init__(
        self,
        downloads: DownloadClient,
        catalog: CatalogStore,
        health: Optional[ConnectionHealth] = None,
    ):
        self.downloads = downloads
        self.catalog = catalog
        self.health = health

    def grab(self, choice: ScoredRelease, category: str, dry_run: bool = False) -> AcquisitionRequest:
        """Submit ``choice`` and mark its entry ``acquiring``.

        In dry-run mode the request is only logged: nothing is submitted and
        the entry keeps its status.

        Raises:
            CollaboratorError: Submission or the status transition failed.
                Connection failures are counted in ``health`` before they
                are re-raised.
        """
        release, entry = choice.release, choice.entry
        request = AcquisitionRequest(
            entry_id=entry.id,
            entry_title=entry.title,
            guid=release.guid,
            release_title=release.title,
            download_url=release.download_url,
            score=choice.score,
            seeders=release.seeders,
        )

        if dry_run:
            logger.info(
                f"[dry-run] Would grab '{release.title}' for '{entry.title}'",
                extra={
                    "event": "acquisition.dry_run",
                    "entry_id": entry.id,
                    "guid": release.guid,
                    "score": choice.score,
                },
            )
            return request

        options = SubmitOptions(
            category=category,
            tags=[SERVICE_TAG],
            handle_tag=f"{SERVICE_TAG}-{entry.id}-{uuid4().hex[:8]}",
        )
        try:
            ack = self.downloads.submit(release.download_url, options)
        except CollaboratorConnectionError as e:
            if self.health is not None:
                self.health.record_failure(e)
            raise
        if self.health is not None:
            self.health.record_success()

        self.catalog.mark_acquiring(entry.id, download_handle=ack.handle, release_title=release.title)

        request.handle = ack.handle
        request.submitted = True
        logger.info(
            f"Grabbed '{release.title}' for '{entry.title}'",
            extra={
                "event": "acquisition.submitted",
                "entry_id": entry.id,
                "guid": release.guid,
                "handle": ack.handle,
                "score": choice.score,
                "seeders": release.seeders,
            },
        )
        return request
