#!/usr/bin/env python3
"""Sample release-sync harness for end-to-end validation.

Seeds a throwaway catalog, runs one release feed sync and prints what was
grabbed, left for review and skipped. Two modes:

1. Fixture mode (default): releases come from a YAML fixture, downloads are
   recorded in memory
2. Real endpoint mode: talks to the Prowlarr and qBittorrent configured in
   the environment (requires network access)

Usage:
    # Fixture mode, no network required
    python scripts/run_sample_sync.py --title "Baldur's Gate 3" --title "Hollow Knight"

    # Real endpoints, dry run so nothing is submitted
    SAMPLE_REAL_RUN=1 python scripts/run_sample_sync.py --config config.yaml --dry-run --title "Hades"
"""

import argparse
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from gamewatch.adapters.factory import build_clients
from gamewatch.config.environment import EnvironmentConfig
from gamewatch.config.loader import load_config
from gamewatch.config.models import AppConfig
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.jobs import ReleaseFeedSync
from gamewatch.logging.config import configure_logging
from gamewatch.persistence import SqlCatalogStore, close_database, init_database
from tests.helpers import FakeDownloadClient, FixtureFeedClient


def print_header(title: str):
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary(summary):
    """Counters, then the grabbed and review lists."""
    print_header("Release Sync Summary")

    rows = sorted(summary.counts.items()) + [
        ("acquisitions", len(summary.acquisitions)),
        ("review", len(summary.review)),
        ("errors", len(summary.errors)),
        ("dry run", "yes" if summary.dry_run else "no"),
        ("duration (seconds)", f"{summary.duration_seconds:.2f}"),
    ]
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        print(f"  {label:<{width}}  {value}")

    if summary.acquisitions:
        print("\nGrabbed:")
        for request in summary.acquisitions:
            print(f"  [{request.score}] {request.entry_title} <- {request.release_title}")
    if summary.review:
        print("\nFor review:")
        for item in summary.review:
            print(f"  [{item.score}, {item.seeders} seeders] entry {item.entry_id} <- {item.release_title}")
    if summary.errors:
        print("\nErrors:")
        for error in summary.errors:
            print(f"  {error.subject}: {error.error_type}: {error.message}")


def main():
    parser = argparse.ArgumentParser(
        description="Run a sample release sync for end-to-end validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (default: built-in defaults)")
    parser.add_argument(
        "--fixtures",
        type=Path,
        default=Path("tests/fixtures/releases.yaml"),
        help="Release fixture YAML (default: tests/fixtures/releases.yaml)",
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=Path("data/sample_sync.db"),
        help="Path to SQLite database (default: data/sample_sync.db)",
    )
    parser.add_argument("--title", action="append", default=[], help="Wanted game title (repeatable)")
    parser.add_argument("--dry-run", action="store_true", help="Only log what would be grabbed")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    args = parser.parse_args()

    load_dotenv()
    use_real_endpoints = os.environ.get("SAMPLE_REAL_RUN", "0") == "1"

    print_header("gamewatch - Sample Release Sync")
    print(f"Database: {args.database}")
    print("Mode: real endpoints" if use_real_endpoints else f"Mode: fixtures from {args.fixtures}")

    if not use_real_endpoints and not args.fixtures.exists():
        print(f"\nError: Fixture file not found: {args.fixtures}")
        return 1

    titles = args.title or ["Baldur's Gate 3", "Game Name", "Hollow Knight"]

    try:
        if args.config:
            app_config, env_config = load_config(args.config)
        else:
            app_config, env_config = AppConfig(), EnvironmentConfig()
        if args.dry_run:
            app_config = app_config.model_copy(
                update={"auto_grab": app_config.auto_grab.model_copy(update={"dry_run": True})}
            )

        configure_logging(level=args.log_level, format_type=app_config.logging.format, environment="validation")

        if args.database.exists():
            args.database.unlink()
        init_database(f"sqlite:///{args.database.absolute()}")
        catalog = SqlCatalogStore()
        for title in titles:
            catalog.add_entry(title)
        print(f"Seeded {len(titles)} wanted titles: {', '.join(titles)}")

        if use_real_endpoints:
            feed, downloads = build_clients(app_config, env_config)
        else:
            feed, downloads = FixtureFeedClient(fixture_path=args.fixtures), FakeDownloadClient()

        summary = ReleaseFeedSync(RuntimeSettings(app_config), feed, downloads, catalog).run()
        print_summary(summary)

        print_header("Output Locations")
        print(f"Database: {args.database.absolute()}")
        print(f"  sqlite3 {args.database.absolute()} 'SELECT id, title, status, download_handle FROM catalog;'")

        close_database()
        return 1 if summary.had_errors else 0

    except Exception as e:
        print(f"\nFatal error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
