"""Scheduled job bodies.

Each job is a callable object (``job.run``) registered with the
``SingleFlightScheduler``; ``run()`` returns a ``JobRunSummary``.
"""

from .acquisition import Acquirer
from .base import Job
from .download_monitor import DownloadMonitor
from .models import AcquisitionRequest, ItemError, JobRunSummary, ReviewItem
from .release_sync import ReleaseFeedSync
from .update_check import UpdateCheck, determine_update_type
from .wanted_search import WantedSearch

__all__ = [
    "Job",
    "Acquirer",
    "ReleaseFeedSync",
    "WantedSearch",
    "UpdateCheck",
    "DownloadMonitor",
    "determine_update_type",
    "JobRunSummary",
    "AcquisitionRequest",
    "ReviewItem",
    "ItemError",
]
