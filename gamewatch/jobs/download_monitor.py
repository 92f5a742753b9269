"""Download monitor: follow submitted downloads to completion."""

from typing import Optional

from gamewatch.adapters.base import CatalogStore, DownloadClient
from gamewatch.adapters.exceptions import CollaboratorConnectionError, CollaboratorError
from gamewatch.config.models import AppConfig, JobId
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.domain.models import CatalogEntry, DownloadState, DownloadStatus
from gamewatch.logging import get_logger
from gamewatch.matching.quality import classify_quality
from gamewatch.matching.versions import parse_version
from gamewatch.scheduler.health import ConnectionHealth

from .base import Job
from .models import JobRunSummary

logger = get_logger(__name__, component="download_monitor")


class DownloadMonitor(Job):
    """The ``download_monitor`` job.

    Completed downloads move their entry to ``acquired`` (recording the
    version and quality parsed from the torrent name); failed or vanished
    downloads put it back to ``wanted``. Anything else is left alone.
    """

    job_id = JobId.DOWNLOAD_MONITOR.value

    def __init__(
        self,
        settings: RuntimeSettings,
        downloads: DownloadClient,
        catalog: CatalogStore,
        health: Optional[ConnectionHealth] = None,
    ):
        super().__init__(settings)
        self.downloads = downloads
        self.catalog = catalog
        self.health = health or ConnectionHealth(
            downloads.name,
            quiet_window_seconds=settings.current().download.quiet_window_seconds,
        )

    def _run(self, config: AppConfig, summary: JobRunSummary) -> None:
        self.downloads.require_configured()

        for entry in self.catalog.list_acquiring():
            if not entry.download_handle:
                summary.increment("untracked")
                continue

            try:
                status = self.downloads.poll_status(entry.download_handle)
            except CollaboratorConnectionError as e:
                self.health.record_failure(e)
                summary.add_error(f"entry:{entry.id}", e)
                continue
            except CollaboratorError as e:
                summary.add_error(f"entry:{entry.id}", e)
                logger.error(
                    f"Status poll for '{entry.title}' failed: {e}",
                    extra={"event": "download_monitor.poll.failed", "entry_id": entry.id},
                )
                continue
            except Exception as e:
                summary.add_error(f"entry:{entry.id}", e)
                logger.error(
                    f"Unexpected error polling '{entry.title}': {e}",
                    extra={"event": "download_monitor.poll.failed", "entry_id": entry.id},
                    exc_info=True,
                )
                continue

            self.health.record_success()
            summary.increment("polled")

            try:
                self._apply(entry, status, summary)
            except CollaboratorError as e:
                summary.add_error(f"entry:{entry.id}", e)
            except Exception as e:
                summary.add_error(f"entry:{entry.id}", e)
                logger.error(
                    f"Unexpected error applying the download state of '{entry.title}': {e}",
                    extra={"event": "download_monitor.apply.failed", "entry_id": entry.id},
                    exc_info=True,
                )

    def _apply(self, entry: CatalogEntry, status: DownloadStatus, summary: JobRunSummary) -> None:
        if status.state == DownloadState.COMPLETED:
            name = status.name or ""
            self.catalog.mark_acquired(
                entry.id,
                {
                    "name": status.name,
                    "version": parse_version(name),
                    "quality": classify_quality(name),
                },
            )
            summary.increment("completed")
            logger.info(
                f"Download of '{entry.title}' completed",
                extra={"event": "download_monitor.completed", "entry_id": entry.id, "handle": status.handle},
            )
        elif status.state in (DownloadState.FAILED, DownloadState.MISSING):
            self.catalog.mark_wanted(entry.id)
            summary.increment("failed")
            logger.warning(
                f"Download of '{entry.title}' {status.state}, entry is wanted again",
                extra={
                    "event": "download_monitor.failed",
                    "entry_id": entry.id,
                    "handle": status.handle,
                    "state": status.state,
                },
            )
        else:
            summary.increment("in_progress")
