"""Tests for the release feed sync job."""

import logging
from unittest.mock import patch

import pytest

from gamewatch.adapters.exceptions import (
    CollaboratorConnectionError,
    CollaboratorResponseError,
    NotConfiguredError,
)
from gamewatch.config.models import AppConfig
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.dedup import DedupStore
from gamewatch.domain.models import CatalogStatus
from gamewatch.jobs import ReleaseFeedSync
from tests.helpers import (
    FakeCatalogStore,
    FakeDownloadClient,
    FixtureFeedClient,
    make_entry,
    make_release,
)


def _settings(**overrides):
    data = {"auto_grab": {"min_score": 100, "min_seeders": 5}}
    data.update(overrides)
    return RuntimeSettings(AppConfig(**data))


@pytest.fixture
def catalog():
    return FakeCatalogStore(
        [
            make_entry(1, "Hollow Knight"),
            make_entry(2, "Game Name"),
        ]
    )


@pytest.fixture
def downloads():
    return FakeDownloadClient()


def _sync(settings, feed, downloads, catalog, **kwargs):
    return ReleaseFeedSync(settings, feed, downloads, catalog, **kwargs)


class TestReleaseFeedSync:
    """Test suite for ReleaseFeedSync."""

    def test_grabs_qualifying_release(self, settings, downloads, catalog):
        feed = FixtureFeedClient(
            {"recent": [make_release("g1", "Hollow.Knight.v1.5.78-GOG", seeders=50)]}
        )

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.count("fetched") == 1
        assert summary.count("new") == 1
        assert summary.count("matched") == 1
        assert len(summary.acquisitions) == 1
        request = summary.acquisitions[0]
        assert request.entry_id == 1
        assert request.submitted is True
        assert request.handle.startswith("gamewatch-1-")

        locator, options = downloads.submitted[0]
        assert locator == "magnet:?xt=urn:btih:g1"
        assert options.category == "gamewatch"
        assert options.tags == ["gamewatch"]

        entry = catalog.entries[1]
        assert entry.status == CatalogStatus.ACQUIRING
        assert entry.download_handle == request.handle

    def test_processed_guids_skipped_on_next_run(self, settings, downloads, catalog):
        feed = FixtureFeedClient({"recent": [make_release("g1", "Unrelated Thing", seeders=50)]})
        sync = _sync(settings, feed, downloads, catalog)

        sync.run()
        summary = sync.run()

        assert summary.count("seen") == 1
        assert summary.count("new") == 0

    def test_clear_processed_cache(self, settings, downloads, catalog):
        feed = FixtureFeedClient({"recent": [make_release("g1", "Unrelated Thing")]})
        sync = _sync(settings, feed, downloads, catalog)
        sync.run()

        assert sync.clear_processed_cache() == 1
        assert sync.run().count("new") == 1

    def test_below_threshold_goes_to_review(self, settings, downloads, catalog):
        feed = FixtureFeedClient({"recent": [make_release("g1", "Hollow Knight", seeders=2)]})

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.acquisitions == []
        assert len(summary.review) == 1
        assert summary.review[0].entry_id == 1
        assert summary.review[0].score == 120
        assert downloads.submitted == []
        assert catalog.entries[1].status == CatalogStatus.WANTED

    def test_add_on_content_never_grabbed(self, settings, downloads, catalog):
        feed = FixtureFeedClient(
            {"recent": [make_release("g1", "Game Name - Blood and Wine", seeders=80)]}
        )

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.count("dlc_skipped") == 1
        assert summary.count("matched") == 0
        assert downloads.submitted == []

    def test_unmatched_release_ignored(self, settings, downloads, catalog):
        feed = FixtureFeedClient(
            {"recent": [make_release("g1", "Totally.Different.Game-SKIDROW", seeders=300)]}
        )

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.count("new") == 1
        assert summary.count("matched") == 0
        assert summary.review == []

    def test_one_grab_per_entry_per_run(self, settings, downloads, catalog):
        feed = FixtureFeedClient(
            {
                "recent": [
                    make_release("g1", "Hollow.Knight.v1.5.78-GOG", seeders=50),
                    make_release("g2", "Hollow Knight Repack", seeders=60),
                ]
            }
        )

        summary = _sync(settings, feed, downloads, catalog).run()

        assert len(summary.acquisitions) == 1
        assert summary.acquisitions[0].guid == "g1"
        assert len(downloads.submitted) == 1

    def test_queries_merged_with_recent_feed(self, downloads, catalog):
        settings = _settings(release_sync={"queries": ["Hollow Knight"]})
        release = make_release("g1", "Hollow.Knight.v1.5.78-GOG", seeders=50)
        feed = FixtureFeedClient({"recent": [release], "query:Hollow Knight": [release]})

        summary = _sync(settings, feed, downloads, catalog).run()

        assert feed.calls == ["recent", "query:Hollow Knight"]
        assert summary.count("fetched") == 2
        assert summary.count("new") == 1
        assert len(downloads.submitted) == 1

    def test_failing_source_isolated(self, downloads, catalog):
        settings = _settings(release_sync={"queries": ["Hollow Knight"]})
        feed = FixtureFeedClient(
            {"query:Hollow Knight": [make_release("g1", "Hollow.Knight.v1.5.78-GOG", seeders=50)]}
        )
        feed.errors["recent"] = CollaboratorConnectionError("refused", collaborator="prowlarr")

        summary = _sync(settings, feed, downloads, catalog).run()

        assert [error.subject for error in summary.errors] == ["recent"]
        assert summary.errors[0].error_type == "CollaboratorConnectionError"
        assert summary.had_errors is True
        assert len(summary.acquisitions) == 1

    def test_connection_errors_feed_health(self, settings, downloads, catalog):
        feed = FixtureFeedClient()
        feed.errors["recent"] = CollaboratorConnectionError("refused")
        sync = _sync(settings, feed, downloads, catalog)

        sync.run()
        sync.run()

        assert sync.health.connected is False
        assert sync.health.consecutive_failures == 2

    def test_submit_failure_recorded_per_release(self, settings, downloads, catalog):
        downloads.errors["submit"] = CollaboratorResponseError("rejected", status_code=415)
        feed = FixtureFeedClient(
            {"recent": [make_release("g1", "Hollow.Knight.v1.5.78-GOG", seeders=50)]}
        )

        summary = _sync(settings, feed, downloads, catalog).run()

        assert [error.subject for error in summary.errors] == ["release:g1"]
        assert summary.acquisitions == []
        assert catalog.entries[1].status == CatalogStatus.WANTED

    def test_dry_run_does_not_submit(self, catalog):
        settings = _settings(auto_grab={"min_score": 100, "min_seeders": 5, "dry_run": True})
        downloads = FakeDownloadClient(configured=False)
        feed = FixtureFeedClient(
            {"recent": [make_release("g1", "Hollow.Knight.v1.5.78-GOG", seeders=50)]}
        )

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.dry_run is True
        assert len(summary.acquisitions) == 1
        assert summary.acquisitions[0].submitted is False
        assert summary.acquisitions[0].handle is None
        assert downloads.submitted == []
        assert catalog.transitions == []

    def test_feed_not_configured(self, settings, downloads, catalog):
        feed = FixtureFeedClient(configured=False)
        with pytest.raises(NotConfiguredError):
            _sync(settings, feed, downloads, catalog).run()
        assert feed.calls == []

    def test_download_client_not_configured(self, settings, catalog):
        feed = FixtureFeedClient()
        with pytest.raises(NotConfiguredError):
            _sync(settings, feed, FakeDownloadClient(configured=False), catalog).run()

    def test_disabled_job_does_nothing(self, downloads, catalog):
        settings = _settings(jobs={"release_sync": {"enabled": False, "interval": "15m"}})
        feed = FixtureFeedClient({"recent": [make_release("g1", "Hollow Knight", seeders=50)]})

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.disabled is True
        assert summary.finished_at is not None
        assert feed.calls == []

    def test_dedup_bounds_come_from_config(self, downloads, catalog):
        settings = _settings(dedup={"max_processed": 3, "max_age": "12h"})
        sync = _sync(settings, FixtureFeedClient(), downloads, catalog)

        assert sync.dedup.max_processed == 3
        assert sync.dedup.max_age_seconds == 43200

    def test_injected_empty_dedup_store_is_used(self, settings, downloads, catalog):
        store = DedupStore(max_processed=5)
        sync = _sync(settings, FixtureFeedClient(), downloads, catalog, dedup=store)
        assert sync.dedup is store

    def test_nothing_wanted(self, settings, downloads):
        catalog = FakeCatalogStore([make_entry(1, "Hollow Knight", status="acquired")])
        feed = FixtureFeedClient({"recent": [make_release("g1", "Hollow Knight", seeders=50)]})

        summary = _sync(settings, feed, downloads, catalog).run()

        assert summary.count("new") == 1
        assert summary.count("matched") == 0

    def test_unexpected_error_isolated_to_one_release(self, settings, downloads, catalog):
        feed = FixtureFeedClient(
            {
                "recent": [
                    make_release("g1", "Hollow Knight", seeders=50),
                    make_release("g2", "Game Name", seeders=50),
                ]
            }
        )
        mark_acquiring = catalog.mark_acquiring
        calls = []

        def flaky_mark_acquiring(entry_id, **kwargs):
            calls.append(entry_id)
            if len(calls) == 1:
                raise RuntimeError("unexpected row state")
            return mark_acquiring(entry_id, **kwargs)

        with patch.object(catalog, "mark_acquiring", side_effect=flaky_mark_acquiring):
            summary = _sync(settings, feed, downloads, catalog).run()

        assert [error.subject for error in summary.errors] == ["release:g1"]
        assert summary.errors[0].error_type == "RuntimeError"
        assert [request.entry_id for request in summary.acquisitions] == [2]
        assert catalog.entries[1].status == CatalogStatus.WANTED
        assert catalog.entries[2].status == CatalogStatus.ACQUIRING

    def test_submit_connection_errors_counted_against_download_client(
        self, settings, downloads, catalog, caplog
    ):
        downloads.errors["submit"] = CollaboratorConnectionError("refused")
        feed = FixtureFeedClient(
            {
                "recent": [
                    make_release("g1", "Hollow Knight", seeders=50),
                    make_release("g2", "Game Name", seeders=50),
                ]
            }
        )
        sync = _sync(settings, feed, downloads, catalog)

        with caplog.at_level(logging.INFO):
            summary = sync.run()

        assert [error.subject for error in summary.errors] == ["release:g1", "release:g2"]
        assert sync.health.connected is True
        assert sync.download_health.connected is False
        assert sync.download_health.consecutive_failures == 2

        lost = [r for r in caplog.records if getattr(r, "event", None) == "health.connection.lost"]
        assert len(lost) == 1
        assert lost[0].collaborator == "fake-downloads"
        assert not [r for r in caplog.records if getattr(r, "event", None) == "release_sync.release.failed"]
