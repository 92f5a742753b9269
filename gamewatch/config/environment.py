"""Environment variables: collaborator endpoints, credentials and overrides.

None of the collaborator variables are required. A missing Prowlarr or
qBittorrent setting leaves the corresponding client unconfigured, and the jobs
that depend on it report "not configured" instead of failing at startup.
"""

import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_DATABASE_URL = "sqlite:///./data/gamewatch.db"


class EnvironmentConfig:
    """Values read from the process environment."""

    def __init__(
        self,
        prowlarr_url: Optional[str] = None,
        prowlarr_api_key: Optional[str] = None,
        qbittorrent_url: Optional[str] = None,
        qbittorrent_username: Optional[str] = None,
        qbittorrent_password: Optional[str] = None,
        log_level: Optional[str] = None,
        database_url: Optional[str] = None,
        environment: Optional[str] = None,
        http_timeout: Optional[int] = None,
    ):
        self.prowlarr_url = prowlarr_url.rstrip("/") if prowlarr_url else None
        self.prowlarr_api_key = prowlarr_api_key
        self.qbittorrent_url = qbittorrent_url.rstrip("/") if qbittorrent_url else None
        self.qbittorrent_username = qbittorrent_username
        self.qbittorrent_password = qbittorrent_password
        self.log_level = log_level
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.environment = environment or "local"
        self.http_timeout = http_timeout

    @property
    def prowlarr_configured(self) -> bool:
        return bool(self.prowlarr_url and self.prowlarr_api_key)

    @property
    def qbittorrent_configured(self) -> bool:
        return bool(self.qbittorrent_url and self.qbittorrent_username and self.qbittorrent_password)


def load_environment_config() -> EnvironmentConfig:
    """Read and validate gamewatch's environment variables.

    Recognised variables:
    - PROWLARR_URL, PROWLARR_API_KEY: indexer feed
    - QBITTORRENT_URL, QBITTORRENT_USERNAME, QBITTORRENT_PASSWORD: download client
    - DATABASE_URL: catalog database (default: sqlite:///./data/gamewatch.db)
    - LOG_LEVEL: overrides the configured log level
    - ENVIRONMENT: label attached to log records (default: local)
    - HTTP_TIMEOUT: overrides advanced.http_request_timeout (seconds)

    Raises:
        ConfigurationError: If a set variable has an invalid value
    """
    errors = []

    prowlarr_url = os.getenv("PROWLARR_URL") or None
    prowlarr_api_key = os.getenv("PROWLARR_API_KEY") or None
    qbittorrent_url = os.getenv("QBITTORRENT_URL") or None
    qbittorrent_username = os.getenv("QBITTORRENT_USERNAME") or None
    qbittorrent_password = os.getenv("QBITTORRENT_PASSWORD") or None
    log_level = os.getenv("LOG_LEVEL") or None
    http_timeout_raw = os.getenv("HTTP_TIMEOUT") or None
    http_timeout = None

    for name, value in (("PROWLARR_URL", prowlarr_url), ("QBITTORRENT_URL", qbittorrent_url)):
        if value and not value.lower().startswith(("http://", "https://")):
            errors.append(f"Invalid {name}: '{value}'. Must start with http:// or https://")

    if prowlarr_url and not prowlarr_api_key:
        errors.append("PROWLARR_URL is set but PROWLARR_API_KEY is not.")

    if bool(qbittorrent_username) != bool(qbittorrent_password):
        errors.append(
            "QBITTORRENT_USERNAME and QBITTORRENT_PASSWORD must be set together."
        )

    if http_timeout_raw:
        try:
            http_timeout = int(http_timeout_raw)
        except ValueError:
            errors.append(f"Invalid HTTP_TIMEOUT: '{http_timeout_raw}'. Must be a whole number of seconds")
        else:
            if not 5 <= http_timeout <= 300:
                errors.append(f"Invalid HTTP_TIMEOUT: {http_timeout}. Must be between 5 and 300 seconds")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your collaborator settings",
                "Leave a collaborator's variables unset entirely to disable it",
            ],
        )

    return EnvironmentConfig(
        prowlarr_url=prowlarr_url,
        prowlarr_api_key=prowlarr_api_key,
        qbittorrent_url=qbittorrent_url,
        qbittorrent_username=qbittorrent_username,
        qbittorrent_password=qbittorrent_password,
        log_level=log_level.upper() if log_level else None,
        database_url=os.getenv("DATABASE_URL") or None,
        environment=os.getenv("ENVIRONMENT") or None,
        http_timeout=http_timeout,
    )
