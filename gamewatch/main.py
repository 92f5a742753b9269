"""Main entry point for the gamewatch release engine."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Dict, Optional, Tuple

from gamewatch.adapters.base import CatalogStore, DownloadClient, MetadataClient, ReleaseFeedClient
from gamewatch.adapters.exceptions import NotConfiguredError
from gamewatch.adapters.factory import build_clients
from gamewatch.config.environment import EnvironmentConfig
from gamewatch.config.exceptions import ConfigurationError
from gamewatch.config.loader import load_config
from gamewatch.config.models import AppConfig, JobId
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.jobs import DownloadMonitor, Job, ReleaseFeedSync, UpdateCheck, WantedSearch
from gamewatch.logging import get_logger
from gamewatch.logging.config import configure_logging
from gamewatch.persistence import SqlCatalogStore, close_database, init_database
from gamewatch.scheduler import SingleFlightScheduler

logger = get_logger(__name__, component="cli")

JOB_NAMES = {
    JobId.RELEASE_SYNC.value: "Release feed sync",
    JobId.WANTED_SEARCH.value: "Wanted search",
    JobId.UPDATE_CHECK.value: "Update check",
    JobId.DOWNLOAD_MONITOR.value: "Download monitor",
}


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Priority for the log level: CLI flag, then LOG_LEVEL, then config.yaml.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_jobs(
    settings: RuntimeSettings,
    feed: ReleaseFeedClient,
    downloads: DownloadClient,
    catalog: CatalogStore,
    metadata: Optional[MetadataClient] = None,
) -> Dict[str, Job]:
    """One instance of every job body, keyed by job id."""
    jobs = [
        ReleaseFeedSync(settings, feed, downloads, catalog),
        WantedSearch(settings, feed, downloads, catalog),
        UpdateCheck(settings, feed, catalog, metadata=metadata),
        DownloadMonitor(settings, downloads, catalog),
    ]
    return {job.job_id: job for job in jobs}


def build_scheduler(
    settings: RuntimeSettings,
    jobs: Dict[str, Job],
    shutdown_event: Optional[threading.Event] = None,
) -> SingleFlightScheduler:
    """Register every job and keep its timer in step with the live settings."""
    scheduler = SingleFlightScheduler(shutdown_event=shutdown_event)
    config = settings.current()
    for job_id, job in jobs.items():
        scheduler.register(
            job_id,
            job.run,
            interval_seconds=config.jobs.get(job_id).interval_seconds,
            name=JOB_NAMES.get(job_id, job_id),
        )
    settings.subscribe(scheduler.update_interval)
    return scheduler


def run_once(scheduler: SingleFlightScheduler, job_id: str) -> int:
    """Run a single job to completion and map its outcome to an exit code.

    Per-item errors are reported but still exit 0: the run itself completed.
    Only a job that could not run at all (not configured, or its body
    failed) exits 1.
    """
    logger.info(f"Running {job_id} once", extra={"event": "service.run_once.starting", "job_id": job_id})
    try:
        summary = scheduler.run_now(job_id)
    except NotConfiguredError as e:
        print(f"Not configured: {e}", file=sys.stderr)
        return 1

    logger.info(
        f"{job_id} completed: {len(summary.acquisitions)} acquisitions, {len(summary.errors)} errors",
        extra={
            "event": "service.run_once.completed",
            "job_id": job_id,
            "had_errors": summary.had_errors,
            **summary.as_log_fields(),
        },
    )
    if summary.had_errors:
        print(f"{job_id} completed with {len(summary.errors)} item errors", file=sys.stderr)
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for gamewatch.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="gamewatch - release matching, auto-grab and update tracking for a game library"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--run-once",
        metavar="JOB",
        choices=[job.value for job in JobId],
        default=None,
        help="Run one job immediately and exit (release_sync, wanted_search, update_check, download_monitor)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    args = parser.parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "gamewatch starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "run_once": args.run_once,
                "enabled_jobs": app_config.enabled_jobs(),
                "dry_run": app_config.auto_grab.dry_run,
            },
        )

        init_database(env_config.database_url)

        settings = RuntimeSettings(app_config)
        feed, downloads = build_clients(app_config, env_config)
        jobs = build_jobs(settings, feed, downloads, SqlCatalogStore())

        if args.run_once:
            scheduler = build_scheduler(settings, jobs)
            try:
                return run_once(scheduler, args.run_once)
            finally:
                close_database()

        shutdown_event = threading.Event()
        scheduler = build_scheduler(settings, jobs, shutdown_event=shutdown_event)

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, shutting down",
                extra={"event": "service.signal_received", "signal": signum},
            )
            scheduler.shutdown(wait=False)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        scheduler.start(run_immediately=True)
        logger.info(
            "Scheduler started. Press Ctrl+C to stop",
            extra={"event": "service.daemon_mode.started"},
        )

        try:
            shutdown_event.wait()
        except KeyboardInterrupt:
            logger.info(
                "Keyboard interrupt received, shutting down",
                extra={"event": "service.keyboard_interrupt"},
            )
            scheduler.shutdown(wait=False)
        finally:
            close_database()

        logger.info(
            "gamewatch stopped",
            extra={"event": "service.stopping", "uptime_seconds": round(time.time() - start_time, 2)},
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
