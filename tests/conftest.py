"""Shared pytest fixtures."""

import pytest

from gamewatch.config.models import AppConfig
from gamewatch.config.runtime import RuntimeSettings
from gamewatch.logging.context import clear_log_context

COLLABORATOR_ENV_VARS = (
    "PROWLARR_URL",
    "PROWLARR_API_KEY",
    "QBITTORRENT_URL",
    "QBITTORRENT_USERNAME",
    "QBITTORRENT_PASSWORD",
    "DATABASE_URL",
    "LOG_LEVEL",
    "HTTP_TIMEOUT",
    "ENVIRONMENT",
)


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every gamewatch environment variable."""
    for name in COLLABORATOR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_env_vars(monkeypatch, clean_env):
    """Fully configured collaborator environment."""
    monkeypatch.setenv("PROWLARR_URL", "http://prowlarr.test:9696")
    monkeypatch.setenv("PROWLARR_API_KEY", "test-api-key")
    monkeypatch.setenv("QBITTORRENT_URL", "http://qbittorrent.test:8080")
    monkeypatch.setenv("QBITTORRENT_USERNAME", "admin")
    monkeypatch.setenv("QBITTORRENT_PASSWORD", "adminadmin")


@pytest.fixture
def app_config():
    """Defaults, with auto-grab thresholds the job tests are written against."""
    return AppConfig(auto_grab={"min_score": 100, "min_seeders": 5})


@pytest.fixture
def settings(app_config):
    return RuntimeSettings(app_config)
