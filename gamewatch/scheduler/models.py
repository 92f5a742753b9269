"""State the scheduler keeps per registered job."""

from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional


@dataclass
class JobRunState:
    """Idle/Running state and run history of one job.

    Mutated only by ``SingleFlightScheduler`` under its guard lock.

    Attributes:
        job_id: Scheduler identifier, also the APScheduler job id
        name: Human-readable name used in logs
        body: Callable executed on every run; its return value is the run result
        interval_seconds: Current tick interval
        is_running: True for exactly the duration of one execution
        current: Future of the in-flight execution, shared by every caller
            that triggers the job while it runs
        last_result: Return value of the last successful run
        last_error: Exception raised by the last run, if it failed
        run_count: Completed executions, successful or not
        error_count: Executions that ended in an exception
        skipped_ticks: Scheduled ticks that found the job already running
    """

    job_id: str
    name: str
    body: Callable[[], Any]
    interval_seconds: int
    is_running: bool = False
    current: Optional[Future] = None
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_result: Any = None
    last_error: Optional[BaseException] = None
    run_count: int = 0
    error_count: int = 0
    skipped_ticks: int = 0

    @property
    def last_run_succeeded(self) -> Optional[bool]:
        """None before the first completed run."""
        if self.run_count == 0:
            return None
        return self.last_error is None
