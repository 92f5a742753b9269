"""Configuration schema (``config.yaml``) expressed as Pydantic models."""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class JobId(str, Enum):
    """Identifiers of the recurring jobs the scheduler knows about."""

    RELEASE_SYNC = "release_sync"
    WANTED_SEARCH = "wanted_search"
    UPDATE_CHECK = "update_check"
    DOWNLOAD_MONITOR = "download_monitor"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


# (minimum, maximum) interval in seconds per job.
JOB_INTERVAL_RANGES: Dict[str, Tuple[int, int]] = {
    JobId.RELEASE_SYNC.value: (60, 86400),
    JobId.WANTED_SEARCH.value: (300, 7 * 86400),
    JobId.UPDATE_CHECK.value: (3600, 7 * 86400),
    JobId.DOWNLOAD_MONITOR.value: (10, 3600),
}

DEFAULT_JOB_INTERVALS: Dict[str, str] = {
    JobId.RELEASE_SYNC.value: "15m",
    JobId.WANTED_SEARCH.value: "6h",
    JobId.UPDATE_CHECK.value: "1d",
    JobId.DOWNLOAD_MONITOR.value: "30s",
}


def _duration_seconds(value: str) -> int:
    try:
        return parse_duration(value)
    except DurationParseError as e:
        raise ValueError(str(e)) from e


class JobScheduleConfig(BaseModel):
    """Enable flag and interval for one recurring job."""

    enabled: bool = Field(True, description="Whether the job runs on its schedule")
    interval: str = Field(..., description="Time between runs, e.g. '15m' or 'PT15M'")

    # Computed from ``interval``
    interval_seconds: Optional[int] = None

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        _duration_seconds(v)
        return v.strip()

    @model_validator(mode="after")
    def compute_interval_seconds(self):
        self.interval_seconds = _duration_seconds(self.interval)
        return self


def _default_schedule(job_id: JobId):
    return lambda: JobScheduleConfig(interval=DEFAULT_JOB_INTERVALS[job_id.value])


class JobsConfig(BaseModel):
    """Schedules of every recurring job."""

    release_sync: JobScheduleConfig = Field(default_factory=_default_schedule(JobId.RELEASE_SYNC))
    wanted_search: JobScheduleConfig = Field(default_factory=_default_schedule(JobId.WANTED_SEARCH))
    update_check: JobScheduleConfig = Field(default_factory=_default_schedule(JobId.UPDATE_CHECK))
    download_monitor: JobScheduleConfig = Field(
        default_factory=_default_schedule(JobId.DOWNLOAD_MONITOR)
    )

    @model_validator(mode="after")
    def validate_interval_ranges(self):
        for job_id, (minimum, maximum) in JOB_INTERVAL_RANGES.items():
            schedule: JobScheduleConfig = getattr(self, job_id)
            try:
                validate_duration_range(
                    schedule.interval_seconds,
                    min_seconds=minimum,
                    max_seconds=maximum,
                    label=f"{job_id} interval",
                )
            except DurationParseError as e:
                raise ValueError(str(e)) from e
        return self

    def get(self, job_id: str) -> JobScheduleConfig:
        """Schedule for ``job_id``; raises KeyError for unknown jobs."""
        if job_id not in JOB_INTERVAL_RANGES:
            raise KeyError(job_id)
        return getattr(self, job_id)


class AutoGrabConfig(BaseModel):
    """Thresholds a release has to clear before it is submitted automatically."""

    min_score: int = Field(100, ge=0, description="Minimum release score")
    min_seeders: int = Field(5, ge=0, description="Minimum seeders reported by the indexer")
    dry_run: bool = Field(
        False, description="Log acquisition decisions without submitting downloads"
    )


class ReleaseSyncConfig(BaseModel):
    """What the release-feed sync pulls from the indexer on each run."""

    queries: List[str] = Field(
        default_factory=list,
        description="Extra saved searches run in addition to the recent-releases feed",
    )
    categories: List[int] = Field(
        default_factory=lambda: [4050], description="Newznab categories (4050 = PC games)"
    )
    limit: int = Field(100, ge=1, le=1000, description="Maximum releases per request")

    @field_validator("queries")
    @classmethod
    def normalize_queries(cls, v: List[str]) -> List[str]:
        """Strip queries and drop blanks and duplicates, keeping the first occurrence."""
        seen = set()
        result = []
        for query in v:
            stripped = query.strip()
            if stripped and stripped.lower() not in seen:
                seen.add(stripped.lower())
                result.append(stripped)
        return result


class DedupConfig(BaseModel):
    """Bounds on the processed-GUID memory of the release-feed sync."""

    max_processed: int = Field(1000, ge=1, description="Maximum remembered GUIDs")
    max_age: str = Field("1d", description="How long a GUID stays remembered")

    max_age_seconds: Optional[int] = None

    @field_validator("max_age")
    @classmethod
    def validate_max_age(cls, v: str) -> str:
        _duration_seconds(v)
        return v.strip()

    @model_validator(mode="after")
    def compute_max_age_seconds(self):
        self.max_age_seconds = _duration_seconds(self.max_age)
        return self


class DownloadConfig(BaseModel):
    """Download client submission and monitoring settings."""

    category: str = Field("gamewatch", min_length=1, description="Download client category")
    quiet_window: str = Field(
        "5m", description="Minimum time between repeated 'still offline' log lines"
    )

    quiet_window_seconds: Optional[int] = None

    @field_validator("quiet_window")
    @classmethod
    def validate_quiet_window(cls, v: str) -> str:
        _duration_seconds(v)
        return v.strip()

    @model_validator(mode="after")
    def compute_quiet_window_seconds(self):
        self.quiet_window_seconds = _duration_seconds(self.quiet_window)
        return self


class UpdatesConfig(BaseModel):
    """Update-check behaviour."""

    verify_with_metadata: bool = Field(
        True,
        description="Reject version bumps whose title resolves to a different game",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="json or key-value")

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """HTTP client settings shared by the collaborator clients."""

    http_request_timeout: int = Field(30, ge=5, le=300, description="Request timeout (seconds)")
    user_agent: str = Field("gamewatch/0.4", min_length=1)

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root of ``config.yaml``. Every section is optional."""

    auto_grab: AutoGrabConfig = Field(default_factory=AutoGrabConfig)
    jobs: JobsConfig = Field(default_factory=JobsConfig)
    release_sync: ReleaseSyncConfig = Field(default_factory=ReleaseSyncConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    updates: UpdatesConfig = Field(default_factory=UpdatesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    def enabled_jobs(self) -> List[str]:
        """Identifiers of the jobs whose schedule is enabled."""
        return [job_id for job_id in JOB_INTERVAL_RANGES if self.jobs.get(job_id).enabled]
