"""Tests for live runtime settings."""

from unittest.mock import Mock

import pytest

from gamewatch.config import AppConfig, ConfigurationError, RuntimeSettings


class TestRuntimeSettings:
    """Test suite for RuntimeSettings."""

    def test_current_returns_snapshot(self, settings, app_config):
        assert settings.current() is app_config

    def test_update_interval_notifies_listeners(self, settings):
        listener = Mock()
        settings.subscribe(listener)

        updated = settings.update_interval("release_sync", "30m")

        assert updated.jobs.release_sync.interval_seconds == 1800
        assert settings.current() is updated
        listener.assert_called_once_with("release_sync", 1800)

    def test_snapshot_taken_before_change_is_unaffected(self, settings):
        before = settings.current()
        settings.update_interval("wanted_search", "12h")

        assert before.jobs.wanted_search.interval_seconds == 21600
        assert settings.current().jobs.wanted_search.interval_seconds == 43200

    def test_out_of_range_interval_rejected(self, settings):
        listener = Mock()
        settings.subscribe(listener)
        before = settings.current()

        with pytest.raises(ConfigurationError, match="too short"):
            settings.update_interval("download_monitor", "5s")

        assert settings.current() is before
        listener.assert_not_called()

    def test_disable_job_keeps_interval(self, settings):
        listener = Mock()
        settings.subscribe(listener)

        updated = settings.update_job("update_check", enabled=False)

        assert updated.jobs.update_check.enabled is False
        assert updated.jobs.update_check.interval_seconds == 86400
        assert "update_check" not in updated.enabled_jobs()
        listener.assert_not_called()

    def test_other_settings_survive_update(self):
        settings = RuntimeSettings(
            AppConfig(auto_grab={"min_score": 140, "dry_run": True}, dedup={"max_age": "2h"})
        )

        updated = settings.update_interval("release_sync", "5m")

        assert updated.auto_grab.min_score == 140
        assert updated.auto_grab.dry_run is True
        assert updated.dedup.max_age_seconds == 7200

    def test_replace_reports_only_changed_intervals(self, settings):
        listener = Mock()
        settings.subscribe(listener)

        settings.replace(
            AppConfig(
                jobs={
                    "release_sync": {"interval": "15m"},
                    "download_monitor": {"interval": "1m"},
                }
            )
        )

        listener.assert_called_once_with("download_monitor", 60)
