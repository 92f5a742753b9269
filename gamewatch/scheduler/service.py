"""Single-flight job scheduling on top of APScheduler."""

import threading
import time
from concurrent.futures import Future
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from gamewatch.adapters.exceptions import NotConfiguredError
from gamewatch.logging import get_logger
from gamewatch.logging.context import log_context
from gamewatch.utils.timestamps import utc_now

from .models import JobRunState

logger = get_logger(__name__, component="scheduler")


class SingleFlightScheduler:
    """Runs registered jobs on intervals and on demand, never overlapping.

    Each job is either Idle or Running. A scheduled tick that finds the job
    Running is skipped. A manual ``trigger`` that finds it Running joins the
    in-flight execution and receives the same ``Future``. The Running -> Idle
    transition happens in a ``finally`` block before the future resolves, so
    a failing body can never leave a job stuck.

    APScheduler provides the timers; the Idle/Running claim is kept here so
    scheduled ticks and manual triggers share one guard.
    """

    def __init__(
        self,
        misfire_grace_time: int = 60,
        shutdown_event: Optional[threading.Event] = None,
    ):
        self.shutdown_event = shutdown_event
        self._jobs: Dict[str, JobRunState] = {}
        self._guard = threading.Lock()
        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": misfire_grace_time,
            },
            timezone=timezone.utc,
        )

    # Registration and lifecycle

    def register(
        self,
        job_id: str,
        body: Callable[[], Any],
        interval_seconds: int,
        name: Optional[str] = None,
    ) -> JobRunState:
        """Register a job body. Its timer is installed by ``start()``.

        Raises:
            ValueError: On a duplicate ``job_id`` or a non-positive interval
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        with self._guard:
            if job_id in self._jobs:
                raise ValueError(f"Job already registered: {job_id}")
            state = JobRunState(
                job_id=job_id,
                name=name or job_id,
                body=body,
                interval_seconds=interval_seconds,
            )
            self._jobs[job_id] = state

        if self.scheduler.running:
            self._install(state, run_immediately=False)

        logger.debug(
            f"Registered job {state.name}",
            extra={
                "event": "scheduler.job.registered",
                "job": job_id,
                "interval_seconds": interval_seconds,
            },
        )
        return state

    def start(self, run_immediately: bool = False) -> None:
        """Install a recurring tick for every registered job and start the timers.

        Args:
            run_immediately: Fire each job's first tick now instead of after one interval
        """
        for state in self.jobs():
            self._install(state, run_immediately=run_immediately)

        self.scheduler.start()

        logger.info(
            f"Scheduler started with {len(self._jobs)} jobs",
            extra={
                "event": "scheduler.started",
                "jobs": {s.job_id: s.interval_seconds for s in self.jobs()},
                "run_immediately": run_immediately,
            },
        )

    def _install(self, state: JobRunState, run_immediately: bool) -> None:
        options = {}
        if run_immediately:
            options["next_run_time"] = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self._tick,
            args=[state.job_id],
            trigger=IntervalTrigger(seconds=state.interval_seconds, timezone=timezone.utc),
            id=state.job_id,
            name=state.name,
            replace_existing=True,
            **options,
        )

    def update_interval(self, job_id: str, interval_seconds: int) -> None:
        """Change a job's interval; a running scheduler reinstalls the timer right away."""
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        state = self.get_state(job_id)
        previous = state.interval_seconds
        state.interval_seconds = interval_seconds

        if self.scheduler.running and self.scheduler.get_job(job_id) is not None:
            self.scheduler.reschedule_job(
                job_id,
                trigger=IntervalTrigger(seconds=interval_seconds, timezone=timezone.utc),
            )

        logger.info(
            f"Interval of {state.name} changed to {interval_seconds} seconds",
            extra={
                "event": "scheduler.job.rescheduled",
                "job": job_id,
                "previous_interval_seconds": previous,
                "interval_seconds": interval_seconds,
            },
        )

    def stop(self, job_id: Optional[str] = None) -> None:
        """Remove the timer of one job (or all). In-flight runs finish normally."""
        targets = [job_id] if job_id else [state.job_id for state in self.jobs()]
        for target in targets:
            self.get_state(target)
            try:
                self.scheduler.remove_job(target)
            except JobLookupError:
                continue
            logger.info(
                f"Stopped schedule of {target}",
                extra={"event": "scheduler.job.stopped", "job": target},
            )

    def shutdown(self, wait: bool = False) -> None:
        """Stop all timers. With ``wait`` APScheduler waits for running ticks."""
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        if self.shutdown_event:
            self.shutdown_event.set()
        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def is_running(self) -> bool:
        return self.scheduler.running

    # Execution

    def trigger(self, job_id: str) -> Future:
        """Run a job now, or join its in-flight run.

        Returns:
            Future resolving to the body's return value, or raising its
            exception. Callers that trigger while a run is in flight all get
            that run's future.
        """
        state = self.get_state(job_id)
        with self._guard:
            if state.is_running and state.current is not None:
                joined = state.current
            else:
                joined = None
                future = self._claim(state)

        if joined is not None:
            logger.info(
                f"{state.name} already running, joining in-flight run",
                extra={"event": "scheduler.trigger.joined", "job": job_id},
            )
            return joined

        worker = threading.Thread(
            target=self._execute,
            args=(state, future, "manual"),
            name=f"gamewatch-{job_id}",
            daemon=True,
        )
        worker.start()
        return future

    def run_now(self, job_id: str, timeout: Optional[float] = None) -> Any:
        """Trigger ``job_id`` and block for its result."""
        return self.trigger(job_id).result(timeout=timeout)

    def _tick(self, job_id: str) -> None:
        state = self._jobs.get(job_id)
        if state is None:
            return

        with self._guard:
            future = None if state.is_running else self._claim(state)
            if future is None:
                state.skipped_ticks += 1

        if future is None:
            logger.debug(
                f"Skipping scheduled tick of {state.name}: previous run still in progress",
                extra={"event": "scheduler.tick.skipped", "job": job_id},
            )
            return

        self._execute(state, future, "schedule")

    def _claim(self, state: JobRunState) -> Future:
        # Caller holds the guard.
        future: Future = Future()
        future.set_running_or_notify_cancel()
        state.is_running = True
        state.current = future
        state.last_started_at = utc_now()
        return future

    def _execute(self, state: JobRunState, future: Future, trigger: str) -> None:
        result: Any = None
        error: Optional[BaseException] = None
        started = time.monotonic()

        with log_context(job=state.job_id, run_id=uuid4().hex[:12], trigger=trigger):
            logger.info(
                f"{state.name} started",
                extra={"event": "scheduler.job.started"},
            )
            try:
                result = state.body()
            except NotConfiguredError as e:
                error = e
                logger.info(
                    f"{state.name} skipped: {e}",
                    extra={"event": "scheduler.job.not_configured"},
                )
            except Exception as e:
                error = e
                logger.error(
                    f"{state.name} failed: {e}",
                    extra={
                        "event": "scheduler.job.failed",
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
            except BaseException as e:
                error = e
                raise
            finally:
                with self._guard:
                    state.is_running = False
                    state.current = None
                    state.last_finished_at = utc_now()
                    state.run_count += 1
                    state.last_error = error
                    if error is None:
                        state.last_result = result
                    else:
                        state.error_count += 1
                if error is not None and not isinstance(error, Exception):
                    # Interpreter exit: joined callers must not wait forever.
                    future.set_exception(error)

            if error is None:
                logger.info(
                    f"{state.name} finished",
                    extra={
                        "event": "scheduler.job.finished",
                        "duration_ms": int((time.monotonic() - started) * 1000),
                    },
                )

        if error is None:
            future.set_result(result)
        else:
            future.set_exception(error)

    # Introspection

    def get_state(self, job_id: str) -> JobRunState:
        """State of ``job_id``; raises KeyError for unknown jobs."""
        try:
            return self._jobs[job_id]
        except KeyError:
            raise KeyError(f"Unknown job: {job_id}") from None

    def jobs(self) -> List[JobRunState]:
        with self._guard:
            return list(self._jobs.values())

    def get_next_run_time(self, job_id: str) -> Optional[datetime]:
        job = self.scheduler.get_job(job_id)
        return getattr(job, "next_run_time", None) if job else None
