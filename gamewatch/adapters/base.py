"""Collaborator contracts and the shared HTTP client.

The engine talks to four collaborators through the abstract classes here:

- CatalogStore: the user's game catalog (system of record for statuses)
- ReleaseFeedClient: the indexer feed offering releases
- DownloadClient: where releases are submitted and polled
- MetadataClient: game metadata used to confirm update candidates

``HttpClient`` carries the request plumbing the HTTP-based implementations
share: one ``requests.Session`` with the configured User-Agent, a timeout on
every call and translation of ``requests`` failures into the collaborator
exception hierarchy.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from gamewatch.domain.models import (
    CatalogEntry,
    DownloadStatus,
    MetadataMatch,
    ReleaseCandidate,
    SubmitAcknowledgement,
    SubmitOptions,
    UpdateRecord,
)
from gamewatch.logging import get_logger

from .exceptions import (
    CollaboratorConnectionError,
    CollaboratorResponseError,
    CollaboratorTimeoutError,
    NotConfiguredError,
)

logger = get_logger(__name__, component="adapter")

ProgressCallback = Callable[[int, int, str], None]


class CatalogStore(ABC):
    """Read access to the catalog plus the status transitions the engine may request.

    Implementations raise ``StorageError`` on failure.
    """

    @abstractmethod
    def list_monitored_wanted(self) -> List[CatalogEntry]:
        """Monitored entries with status ``wanted``."""

    @abstractmethod
    def list_acquiring(self) -> List[CatalogEntry]:
        """Entries with status ``acquiring``."""

    @abstractmethod
    def list_acquired(self) -> List[CatalogEntry]:
        """Entries with status ``acquired``."""

    @abstractmethod
    def mark_acquiring(
        self,
        entry_id: int,
        download_handle: Optional[str] = None,
        release_title: Optional[str] = None,
    ) -> None:
        """``wanted`` -> ``acquiring`` after a release was submitted."""

    @abstractmethod
    def mark_acquired(self, entry_id: int, release_info: Optional[Dict[str, Any]] = None) -> None:
        """``acquiring`` -> ``acquired``.

        ``release_info`` may carry ``version`` and ``quality`` of what was
        downloaded; the store records them as the installed version and tier.
        """

    @abstractmethod
    def mark_wanted(self, entry_id: int) -> None:
        """Back to ``wanted``, e.g. after a failed download."""

    @abstractmethod
    def record_update(self, update: UpdateRecord) -> bool:
        """Store an update found for an acquired entry.

        Returns:
            False if an update with the same download URL or title was
            already recorded for that entry
        """

    @abstractmethod
    def list_updates(self, entry_id: int) -> List[UpdateRecord]:
        """Updates recorded for ``entry_id``."""


class ReleaseFeedClient(ABC):
    """Source of releases."""

    name = "feed"

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether endpoint and credentials are present."""

    @abstractmethod
    def fetch_recent_releases(self, since: Optional[datetime] = None) -> List[ReleaseCandidate]:
        """Newest releases across the feed, newest first."""

    @abstractmethod
    def search(self, query: str) -> List[ReleaseCandidate]:
        """Releases matching a free-text query, in the feed's relevance order."""

    def fetch_configured_query_releases(self, query: str) -> List[ReleaseCandidate]:
        """Releases for one of the user's saved queries."""
        return self.search(query)

    def require_configured(self) -> None:
        if not self.is_configured():
            raise NotConfiguredError(f"{self.name} is not configured", collaborator=self.name)


class DownloadClient(ABC):
    """Where releases are sent for download."""

    name = "download-client"

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether endpoint and credentials are present."""

    @abstractmethod
    def submit(self, locator: str, options: SubmitOptions) -> SubmitAcknowledgement:
        """Hand a release's download locator (URL or magnet) to the client."""

    @abstractmethod
    def poll_status(self, handle: str) -> DownloadStatus:
        """Current state of a submitted download; ``missing`` if the client lost it."""

    def require_configured(self) -> None:
        if not self.is_configured():
            raise NotConfiguredError(f"{self.name} is not configured", collaborator=self.name)


class MetadataClient(ABC):
    """Game metadata lookups."""

    name = "metadata"

    @abstractmethod
    def search(self, query: str) -> List[MetadataMatch]:
        """Games whose title matches ``query``, best match first."""

    def search_batch(
        self,
        queries: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, List[MetadataMatch]]:
        """Run ``search`` for each distinct query.

        ``on_progress(completed, total, query)`` is called after each query.
        Implementations with a native batch endpoint override this.
        """
        distinct = list(dict.fromkeys(queries))
        results: Dict[str, List[MetadataMatch]] = {}
        for index, query in enumerate(distinct, 1):
            results[query] = self.search(query)
            if on_progress is not None:
                on_progress(index, len(distinct), query)
        return results


class HttpClient:
    """``requests`` session wrapper shared by the HTTP collaborators.

    Attributes:
        base_url: Endpoint root without trailing slash
        timeout: Per-request timeout in seconds
    """

    name = "http"

    def __init__(
        self,
        base_url: Optional[str],
        timeout: int = 30,
        user_agent: str = "gamewatch/0.4",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """Send a request and return the response if its status is below 400.

        Raises:
            CollaboratorTimeoutError: The request timed out
            CollaboratorConnectionError: The endpoint could not be reached
            CollaboratorResponseError: The endpoint answered 4xx/5xx
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(
            f"HTTP {method} {url}",
            extra={"event": "adapter.request", "collaborator": self.name, "url": url},
        )

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise CollaboratorTimeoutError(
                f"{self.name} request to {url} timed out after {self.timeout} seconds",
                collaborator=self.name,
                url=url,
            ) from e
        except requests.exceptions.RequestException as e:
            raise CollaboratorConnectionError(
                f"{self.name} connection failed: {e}", collaborator=self.name, url=url
            ) from e

        if response.status_code >= 400:
            level = logging.WARNING if response.status_code >= 500 else logging.ERROR
            logger.log(
                level,
                f"HTTP {response.status_code} from {self.name}",
                extra={
                    "event": "adapter.response.error",
                    "collaborator": self.name,
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise CollaboratorResponseError(
                f"{self.name} API error ({response.status_code}): {response.reason}",
                collaborator=self.name,
                status_code=response.status_code,
                url=url,
            )

        return response

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise CollaboratorResponseError(
                f"{self.name} returned invalid JSON: {e}",
                collaborator=self.name,
                status_code=response.status_code,
                url=response.url,
            ) from e
