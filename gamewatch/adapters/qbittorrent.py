"""qBittorrent Web API download client."""

from typing import Any, Dict, Optional
from uuid import uuid4

import requests

from gamewatch.domain.models import (
    DownloadState,
    DownloadStatus,
    SubmitAcknowledgement,
    SubmitOptions,
)
from gamewatch.logging import get_logger

from .base import DownloadClient, HttpClient
from .exceptions import CollaboratorResponseError

logger = get_logger(__name__, component="qbittorrent")

# qBittorrent torrent states collapsed to DownloadState.
TORRENT_STATES: Dict[str, DownloadState] = {
    "error": DownloadState.FAILED,
    "missingFiles": DownloadState.FAILED,
    "uploading": DownloadState.COMPLETED,
    "pausedUP": DownloadState.COMPLETED,
    "stoppedUP": DownloadState.COMPLETED,
    "queuedUP": DownloadState.COMPLETED,
    "stalledUP": DownloadState.COMPLETED,
    "checkingUP": DownloadState.COMPLETED,
    "forcedUP": DownloadState.COMPLETED,
    "allocating": DownloadState.DOWNLOADING,
    "downloading": DownloadState.DOWNLOADING,
    "metaDL": DownloadState.DOWNLOADING,
    "stalledDL": DownloadState.DOWNLOADING,
    "checkingDL": DownloadState.DOWNLOADING,
    "forcedDL": DownloadState.DOWNLOADING,
    "checkingResumeData": DownloadState.DOWNLOADING,
    "moving": DownloadState.DOWNLOADING,
    "pausedDL": DownloadState.QUEUED,
    "stoppedDL": DownloadState.QUEUED,
    "queuedDL": DownloadState.QUEUED,
}


class QBittorrentClient(HttpClient, DownloadClient):
    """Submits releases to qBittorrent and polls them by tag.

    Every submitted torrent gets a unique tag which doubles as the download
    handle; ``/torrents/add`` does not return the info-hash.
    """

    name = "qbittorrent"

    def __init__(
        self,
        base_url: Optional[str],
        username: Optional[str],
        password: Optional[str],
        timeout: int = 30,
        user_agent: str = "gamewatch/0.4",
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, user_agent=user_agent, session=session)
        self.username = username
        self.password = password
        self._authenticated = False

    def is_configured(self) -> bool:
        return bool(self.base_url and self.username and self.password)

    def _login(self) -> None:
        if self._authenticated:
            return
        response = self._request(
            "POST",
            "api/v2/auth/login",
            data={"username": self.username, "password": self.password},
            headers={"Referer": self.base_url},
        )
        if response.text.strip() != "Ok.":
            raise CollaboratorResponseError(
                "qBittorrent authentication failed", collaborator=self.name
            )
        self._authenticated = True
        logger.info("Authenticated with qBittorrent", extra={"event": "qbittorrent.authenticated"})

    def _call(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        self.require_configured()
        self._login()
        try:
            return self._request(method, path, **kwargs)
        except CollaboratorResponseError as e:
            if e.status_code != 403:
                raise
        # Session cookie expired: log in again and retry once.
        self._authenticated = False
        self._login()
        return self._request(method, path, **kwargs)

    def submit(self, locator: str, options: SubmitOptions) -> SubmitAcknowledgement:
        handle = options.handle_tag or f"gamewatch-{uuid4().hex[:12]}"
        tags = [tag for tag in options.tags if tag != handle] + [handle]

        response = self._call(
            "POST",
            "api/v2/torrents/add",
            data={"urls": locator, "category": options.category, "tags": ",".join(tags)},
        )
        if response.text.strip() == "Fails.":
            raise CollaboratorResponseError(
                "qBittorrent rejected the torrent", collaborator=self.name
            )

        logger.info(
            "Torrent submitted",
            extra={"event": "qbittorrent.torrent.added", "handle": handle, "category": options.category},
        )
        return SubmitAcknowledgement(handle=handle)

    def poll_status(self, handle: str) -> DownloadStatus:
        response = self._call("GET", "api/v2/torrents/info", params={"tag": handle})
        torrents = self._json(response)
        if not torrents:
            return DownloadStatus(handle=handle, state=DownloadState.MISSING)

        torrent = torrents[0]
        progress = min(max(float(torrent.get("progress") or 0.0), 0.0), 1.0)
        state = TORRENT_STATES.get(torrent.get("state", ""), DownloadState.DOWNLOADING)
        if progress >= 1.0 and state != DownloadState.FAILED:
            state = DownloadState.COMPLETED

        return DownloadStatus(
            handle=handle,
            state=state,
            progress=progress,
            name=torrent.get("name"),
        )
