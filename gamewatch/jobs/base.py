"""Common run skeleton for the scheduled job bodies."""

from abc import ABC, abstractmethod

from gamewatch.config.models import AppConfig
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.logging import get_logger

from .models import JobRunSummary

logger = get_logger(__name__, component="jobs")


class Job(ABC):
    """A job body the scheduler runs on an interval or on demand.

    ``run()`` reads the settings once, returns early when the job is
    disabled, and logs the summary. Subclasses implement ``_run``; they
    raise ``NotConfiguredError`` before doing any work when a collaborator
    they need is missing, and record per-item failures in the summary.
    """

    job_id: str = ""

    def __init__(self, settings: RuntimeSettings):
        self.settings = settings

    def run(self) -> JobRunSummary:
        config = self.settings.current()
        summary = JobRunSummary(job_id=self.job_id, dry_run=config.auto_grab.dry_run)

        if not config.jobs.get(self.job_id).enabled:
            summary.disabled = True
            logger.debug(
                f"{self.job_id} is disabled, nothing to do",
                extra={"event": "job.run.disabled", "job_id": self.job_id},
            )
            return summary.finish()

        self._run(config, summary)
        summary.finish()

        logger.info(
            f"{self.job_id} finished",
            extra={"event": "job.run.summary", "job_id": self.job_id, **summary.as_log_fields()},
        )
        return summary

    @abstractmethod
    def _run(self, config: AppConfig, summary: JobRunSummary) -> None:
        """Do one run's work, filling in ``summary``."""
