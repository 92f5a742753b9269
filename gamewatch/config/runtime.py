"""Live configuration shared between the scheduler and job bodies.

Job bodies call ``RuntimeSettings.current()`` at entry and use that snapshot
for the whole run, so a change made mid-run takes effect on the next run.
Interval changes are pushed to subscribers (the scheduler) so the timer is
reinstalled immediately.
"""

import threading
from typing import Callable, List

from gamewatch.logging import get_logger

from .loader import validate_app_config
from .models import JOB_INTERVAL_RANGES, AppConfig

logger = get_logger(__name__, component="config")

IntervalListener = Callable[[str, int], None]


class RuntimeSettings:
    """Thread-safe holder of the active ``AppConfig``."""

    def __init__(self, config: AppConfig):
        self._config = config
        self._lock = threading.Lock()
        self._listeners: List[IntervalListener] = []

    def current(self) -> AppConfig:
        with self._lock:
            return self._config

    def subscribe(self, listener: IntervalListener) -> None:
        """Call ``listener(job_id, interval_seconds)`` whenever a job interval changes."""
        with self._lock:
            self._listeners.append(listener)

    def replace(self, config: AppConfig) -> None:
        """Swap in a new configuration and notify listeners of interval changes."""
        with self._lock:
            previous = self._config
            self._config = config
            listeners = list(self._listeners)

        changed = [
            (job_id, config.jobs.get(job_id).interval_seconds)
            for job_id in JOB_INTERVAL_RANGES
            if config.jobs.get(job_id).interval_seconds
            != previous.jobs.get(job_id).interval_seconds
        ]

        logger.info(
            "Runtime settings replaced",
            extra={
                "event": "config.runtime.replaced",
                "changed_intervals": [job_id for job_id, _ in changed],
            },
        )

        for job_id, seconds in changed:
            for listener in listeners:
                listener(job_id, seconds)

    def update_job(self, job_id: str, **changes) -> AppConfig:
        """Change ``enabled`` and/or ``interval`` of one job.

        The result is validated like a freshly loaded file, so an out-of-range
        interval raises ``ConfigurationError`` and leaves the settings untouched.

        Example:
            >>> settings.update_job("release_sync", interval="30m")
        """
        data = self.current().model_dump()
        schedule = data["jobs"][job_id]
        schedule.update(changes)
        schedule.pop("interval_seconds", None)
        updated = validate_app_config(data)
        self.replace(updated)
        return updated

    def update_interval(self, job_id: str, interval: str) -> AppConfig:
        """Change one job's interval; subscribers reinstall its timer."""
        return self.update_job(job_id, interval=interval)
