"""Construction of the HTTP collaborator clients from configuration."""

from typing import Tuple

from gamewatch.config.environment import EnvironmentConfig
from gamewatch.config.models import AppConfig
from gamewatch.logging import get_logger

from .prowlarr import ProwlarrFeedClient
from .qbittorrent import QBittorrentClient

logger = get_logger(__name__, component="adapter")


def build_clients(
    app_config: AppConfig, env_config: EnvironmentConfig
) -> Tuple[ProwlarrFeedClient, QBittorrentClient]:
    """Create the feed and download clients.

    Clients are always returned; one whose environment variables are missing
    reports ``is_configured() == False`` and the jobs using it skip their runs.
    """
    advanced = app_config.advanced
    timeout = env_config.http_timeout or advanced.http_request_timeout
    feed = ProwlarrFeedClient(
        base_url=env_config.prowlarr_url,
        api_key=env_config.prowlarr_api_key,
        categories=app_config.release_sync.categories,
        limit=app_config.release_sync.limit,
        timeout=timeout,
        user_agent=advanced.user_agent,
    )
    downloads = QBittorrentClient(
        base_url=env_config.qbittorrent_url,
        username=env_config.qbittorrent_username,
        password=env_config.qbittorrent_password,
        timeout=timeout,
        user_agent=advanced.user_agent,
    )

    logger.info(
        "Collaborator clients created",
        extra={
            "event": "adapter.clients.created",
            "prowlarr_configured": feed.is_configured(),
            "qbittorrent_configured": downloads.is_configured(),
        },
    )
    return feed, downloads
