"""Tests for the wanted search job."""

import logging

import pytest

from gamewatch.adapters.exceptions import (
    CollaboratorConnectionError,
    CollaboratorResponseError,
    NotConfiguredError,
)
from gamewatch.config.models import AppConfig
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.domain.models import CatalogStatus, DownloadState
from gamewatch.jobs import WantedSearch
from tests.helpers import (
    FakeCatalogStore,
    FakeDownloadClient,
    FixtureFeedClient,
    make_entry,
    make_release,
)


@pytest.fixture
def catalog():
    return FakeCatalogStore(
        [
            make_entry(1, "Hollow Knight"),
            make_entry(2, "Stardew Valley"),
            make_entry(3, "Celeste", monitored=False),
        ]
    )


@pytest.fixture
def downloads():
    return FakeDownloadClient()


@pytest.fixture
def feed():
    return FixtureFeedClient()


class TestWantedSearch:
    """Test suite for WantedSearch."""

    def test_first_qualifying_release_grabbed(self, settings, feed, downloads, catalog):
        feed.search_results["Hollow Knight"] = [
            make_release("few-seeders", "Hollow Knight", seeders=2),
            make_release("first-fit", "Hollow Knight", seeders=10),
            make_release("best", "Hollow.Knight-GOG", seeders=100),
        ]

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert summary.count("matched") == 1
        assert [request.guid for request in summary.acquisitions] == ["first-fit"]
        assert catalog.entries[1].status == CatalogStatus.ACQUIRING
        assert catalog.entries[2].status == CatalogStatus.WANTED

    def test_searches_monitored_wanted_entries_only(self, settings, feed, downloads, catalog):
        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert feed.calls == ["search:Hollow Knight", "search:Stardew Valley"]
        assert summary.count("searched") == 2
        assert summary.count("not_found") == 2

    def test_add_ons_and_weak_matches_skipped(self, settings, feed, downloads, catalog):
        feed.search_results["Hollow Knight"] = [
            make_release("dlc", "Hollow Knight DLC Pack", seeders=50),
            make_release("other", "Totally Different Game", seeders=50),
        ]

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert summary.count("fetched") == 2
        assert summary.acquisitions == []
        assert downloads.submitted == []

    def test_failed_download_reset_and_searched_again(self, settings, feed, downloads):
        catalog = FakeCatalogStore(
            [make_entry(4, "Hades", status="acquiring", download_handle="gamewatch-4-abc")]
        )
        downloads.set_state("gamewatch-4-abc", DownloadState.FAILED)

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert summary.count("reset") == 1
        assert catalog.transitions[0] == ("wanted", 4, None)
        assert feed.calls == ["search:Hades"]

    def test_missing_download_reset(self, settings, feed, downloads):
        catalog = FakeCatalogStore(
            [make_entry(4, "Hades", status="acquiring", download_handle="gone")]
        )

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert summary.count("reset") == 1

    def test_active_download_left_alone(self, settings, feed, downloads):
        catalog = FakeCatalogStore(
            [make_entry(4, "Hades", status="acquiring", download_handle="active")]
        )
        downloads.set_state("active", DownloadState.DOWNLOADING)

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert summary.count("reset") == 0
        assert catalog.entries[4].status == CatalogStatus.ACQUIRING
        assert feed.calls == []

    def test_entry_errors_isolated(self, settings, feed, downloads, catalog):
        feed.errors["search:Hollow Knight"] = CollaboratorResponseError("boom", status_code=500)
        feed.search_results["Stardew Valley"] = [
            make_release("sv", "Stardew.Valley.v1.6.8-GOG", seeders=40)
        ]

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert [error.subject for error in summary.errors] == ["entry:1"]
        assert [request.entry_id for request in summary.acquisitions] == [2]

    def test_connection_error_recorded_in_health(self, settings, feed, downloads, catalog):
        feed.errors["search:Hollow Knight"] = CollaboratorConnectionError("refused")
        job = WantedSearch(settings, feed, downloads, catalog)

        job.run()

        # The second search succeeded, which ends the outage.
        assert job.health.connected is True
        assert job.health.consecutive_failures == 0

    def test_feed_not_configured(self, settings, downloads, catalog):
        with pytest.raises(NotConfiguredError):
            WantedSearch(settings, FixtureFeedClient(configured=False), downloads, catalog).run()

    def test_download_client_not_configured(self, settings, feed, catalog):
        with pytest.raises(NotConfiguredError):
            WantedSearch(settings, feed, FakeDownloadClient(configured=False), catalog).run()

    def test_dry_run_without_download_client(self, feed, catalog):
        settings = RuntimeSettings(
            AppConfig(auto_grab={"min_score": 100, "min_seeders": 5, "dry_run": True})
        )
        feed.search_results["Hollow Knight"] = [make_release("hk", "Hollow Knight", seeders=10)]
        downloads = FakeDownloadClient(configured=False)

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert len(summary.acquisitions) == 1
        assert summary.acquisitions[0].submitted is False
        assert catalog.entries[1].status == CatalogStatus.WANTED

    def test_unexpected_error_isolated_to_one_entry(self, settings, feed, downloads, catalog):
        feed.errors["search:Hollow Knight"] = ValueError("bad payload")
        feed.search_results["Stardew Valley"] = [
            make_release("sv", "Stardew.Valley.v1.6.8-GOG", seeders=40)
        ]

        summary = WantedSearch(settings, feed, downloads, catalog).run()

        assert [error.subject for error in summary.errors] == ["entry:1"]
        assert summary.errors[0].error_type == "ValueError"
        assert [request.entry_id for request in summary.acquisitions] == [2]

    def test_submit_outage_logged_once_for_download_client(
        self, settings, feed, downloads, catalog, caplog
    ):
        downloads.errors["submit"] = CollaboratorConnectionError("refused")
        feed.search_results["Hollow Knight"] = [make_release("hk", "Hollow Knight", seeders=10)]
        feed.search_results["Stardew Valley"] = [
            make_release("sv", "Stardew.Valley.v1.6.8-GOG", seeders=40)
        ]
        job = WantedSearch(settings, feed, downloads, catalog)

        with caplog.at_level(logging.INFO):
            job.run()
            job.run()

        events = [getattr(record, "event", None) for record in caplog.records]
        lost = [r for r in caplog.records if getattr(r, "event", None) == "health.connection.lost"]
        assert len(lost) == 1
        assert lost[0].collaborator == "fake-downloads"
        assert "health.connection.restored" not in events

        assert job.health.connected is True
        assert job.download_health.connected is False
        assert job.download_health.consecutive_failures == 4

    def test_poll_outage_counted_against_download_client(self, settings, feed, downloads):
        catalog = FakeCatalogStore(
            [make_entry(1, "Hollow Knight", status=CatalogStatus.ACQUIRING, download_handle="h1")]
        )
        downloads.errors["h1"] = CollaboratorConnectionError("refused")
        job = WantedSearch(settings, feed, downloads, catalog)

        summary = job.run()

        assert [error.subject for error in summary.errors] == ["entry:1"]
        assert job.download_health.consecutive_failures == 1
        assert job.health.connected is True
