"""Non-fatal configuration checks.

These run on the raw YAML mapping before schema validation and only produce
warnings: the settings are legal but probably not what the user intended.
"""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """Return human-readable warnings for risky but valid settings."""
    messages: List[str] = []

    auto_grab = config_dict.get("auto_grab") or {}
    if isinstance(auto_grab, dict):
        if auto_grab.get("dry_run") is True:
            messages.append("auto_grab.dry_run is enabled: matching releases will not be downloaded")
        if auto_grab.get("min_seeders") == 0:
            messages.append("auto_grab.min_seeders is 0: dead torrents may be grabbed")
        min_score = auto_grab.get("min_score")
        if isinstance(min_score, int) and min_score < 80:
            messages.append(
                f"auto_grab.min_score ({min_score}) admits low-confidence matches"
            )

    jobs = config_dict.get("jobs") or {}
    if isinstance(jobs, dict):
        release_sync = jobs.get("release_sync") or {}
        interval = release_sync.get("interval") if isinstance(release_sync, dict) else None
        if isinstance(interval, str):
            try:
                if parse_duration(interval) < 300:
                    messages.append(
                        f"Short release_sync interval ({interval}) may trigger indexer rate limits"
                    )
            except DurationParseError:
                # Reported as an error by schema validation.
                pass
        for job_id, schedule in jobs.items():
            if isinstance(schedule, dict) and schedule.get("enabled") is False:
                messages.append(f"Job '{job_id}' is disabled and will not run on a schedule")

    dedup = config_dict.get("dedup") or {}
    if isinstance(dedup, dict):
        max_processed = dedup.get("max_processed")
        if isinstance(max_processed, int) and max_processed > 100000:
            messages.append(f"Large dedup.max_processed ({max_processed}) increases memory use")

    return messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a ``UserWarning``."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
