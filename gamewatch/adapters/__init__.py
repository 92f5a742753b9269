"""Collaborator contracts and clients.

Contracts (``base``): CatalogStore, ReleaseFeedClient, DownloadClient,
MetadataClient. HTTP implementations: ``prowlarr.ProwlarrFeedClient`` and
``qbittorrent.QBittorrentClient``; the SQL catalog store lives in
``gamewatch.persistence``.
"""

from .base import CatalogStore, DownloadClient, HttpClient, MetadataClient, ReleaseFeedClient
from .exceptions import (
    CollaboratorConnectionError,
    CollaboratorError,
    CollaboratorResponseError,
    CollaboratorTimeoutError,
    NotConfiguredError,
    StorageError,
)
from .factory import build_clients
from .prowlarr import ProwlarrFeedClient
from .qbittorrent import QBittorrentClient

__all__ = [
    "CatalogStore",
    "ReleaseFeedClient",
    "DownloadClient",
    "MetadataClient",
    "HttpClient",
    "ProwlarrFeedClient",
    "QBittorrentClient",
    "build_clients",
    "CollaboratorError",
    "NotConfiguredError",
    "CollaboratorConnectionError",
    "CollaboratorTimeoutError",
    "CollaboratorResponseError",
    "StorageError",
]
