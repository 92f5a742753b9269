"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from gamewatch.domain.models import (
    CatalogEntry,
    CatalogStatus,
    DownloadState,
    DownloadStatus,
    ReleaseCandidate,
    SubmitOptions,
    UpdatePolicy,
    UpdateRecord,
    UpdateType,
)
from gamewatch.jobs.models import AcquisitionRequest, ItemError, JobRunSummary


class TestCatalogEntry:
    """Tests for CatalogEntry model."""

    def test_defaults(self):
        entry = CatalogEntry(id=1, title="Hades")

        assert entry.status == "wanted"
        assert entry.status == CatalogStatus.WANTED
        assert entry.update_policy == UpdatePolicy.NOTIFY
        assert entry.monitored is True
        assert entry.installed_version is None

    def test_title_stripped(self):
        assert CatalogEntry(id=1, title="  Hollow Knight ").title == "Hollow Knight"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationError):
            CatalogEntry(id=1, title=title)

    def test_year_bounds(self):
        with pytest.raises(ValidationError):
            CatalogEntry(id=1, title="Pong", year=1958)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            CatalogEntry(id=1, title="Hades", status="deleted")

    def test_copy_with_update(self):
        entry = CatalogEntry(id=1, title="Hades")
        acquiring = entry.model_copy(update={"status": "acquiring", "download_handle": "h1"})

        assert acquiring.status == "acquiring"
        assert entry.status == "wanted"


class TestReleaseCandidate:
    """Tests for ReleaseCandidate model."""

    def test_minimal(self):
        release = ReleaseCandidate(guid="g1", title="Hades-GOG", download_url="magnet:?xt=urn:btih:g1")

        assert release.size == 0
        assert release.seeders is None
        assert release.published_at is None

    def test_published_at_normalised_to_utc(self):
        release = ReleaseCandidate(
            guid="g1",
            title="Hades-GOG",
            download_url="magnet:?xt=urn:btih:g1",
            published_at=datetime(2026, 10, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))),
        )
        assert release.published_at == datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        assert release.published_at.tzinfo == timezone.utc

    def test_size_gb(self):
        release = ReleaseCandidate(guid="g1", title="x", size=3 * 1024 ** 3, download_url="u")
        assert release.size_gb == 3

    @pytest.mark.parametrize(
        "field, value",
        [("guid", ""), ("title", ""), ("download_url", ""), ("size", -1), ("seeders", -5)],
    )
    def test_invalid_fields(self, field, value):
        data = {"guid": "g1", "title": "Hades", "download_url": "u"}
        data[field] = value
        with pytest.raises(ValidationError):
            ReleaseCandidate(**data)


class TestDownloadModels:
    def test_status_progress_bounds(self):
        with pytest.raises(ValidationError):
            DownloadStatus(handle="h1", state=DownloadState.DOWNLOADING, progress=1.5)

    def test_status_stores_plain_value(self):
        status = DownloadStatus(handle="h1", state=DownloadState.COMPLETED)
        assert status.state == "completed"

    def test_submit_defaults(self):
        options = SubmitOptions()
        assert options.category == "gamewatch"
        assert options.tags == []
        assert options.handle_tag is None


class TestUpdateRecord:
    def test_type_from_string(self):
        update = UpdateRecord(entry_id=1, update_type="dlc", title="x", download_url="u")
        assert update.update_type == UpdateType.DLC

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            UpdateRecord(entry_id=1, update_type="patch", title="x", download_url="u")


class TestJobRunSummary:
    """Run summary bookkeeping."""

    def test_counters(self):
        summary = JobRunSummary(job_id="release_sync")
        summary.increment("fetched", 10)
        summary.increment("new")
        summary.increment("new")

        assert summary.count("fetched") == 10
        assert summary.count("new") == 2
        assert summary.count("matched") == 0

    def test_errors(self):
        summary = JobRunSummary(job_id="wanted_search")
        assert summary.had_errors is False

        item = summary.add_error("entry:3", TimeoutError("feed timed out"))

        assert summary.had_errors is True
        assert item == ItemError(subject="entry:3", error_type="TimeoutError", message="feed timed out")

    def test_duration_and_log_fields(self):
        summary = JobRunSummary(job_id="release_sync", dry_run=True)
        assert summary.duration_seconds == 0.0

        summary.increment("new", 4)
        summary.acquisitions.append(
            AcquisitionRequest(
                entry_id=1,
                entry_title="Hades",
                guid="g1",
                release_title="Hades-GOG",
                download_url="u",
                score=150,
            )
        )
        summary.finish()
        fields = summary.as_log_fields()

        assert summary.duration_seconds >= 0
        assert fields["new"] == 4
        assert fields["acquisitions"] == 1
        assert fields["review"] == 0
        assert fields["errors"] == 0
        assert fields["dry_run"] is True
