"""Prowlarr indexer feed client."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import requests
from pydantic import ValidationError

from gamewatch.domain.models import ReleaseCandidate
from gamewatch.logging import get_logger
from gamewatch.utils.timestamps import ensure_utc, parse_iso_datetime

from .base import HttpClient, ReleaseFeedClient
from .exceptions import CollaboratorResponseError

logger = get_logger(__name__, component="prowlarr")


class ProwlarrFeedClient(HttpClient, ReleaseFeedClient):
    """Reads releases from Prowlarr's aggregated search API.

    The recent-releases feed is a search with an empty query, which Prowlarr
    answers with the newest releases of every enabled indexer.
    """

    name = "prowlarr"

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        categories: Optional[Iterable[int]] = None,
        limit: int = 100,
        timeout: int = 30,
        user_agent: str = "gamewatch/0.4",
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, user_agent=user_agent, session=session)
        self.api_key = api_key
        self.categories = list(categories or [])
        self.limit = limit

    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def fetch_recent_releases(self, since: Optional[datetime] = None) -> List[ReleaseCandidate]:
        releases = self._search("")
        if since is not None:
            cutoff = ensure_utc(since)
            releases = [
                release for release in releases
                if release.published_at is None or release.published_at >= cutoff
            ]
        logger.info(
            f"Fetched {len(releases)} recent releases",
            extra={"event": "prowlarr.recent.fetched", "release_count": len(releases)},
        )
        return releases

    def search(self, query: str) -> List[ReleaseCandidate]:
        releases = self._search(query)
        logger.debug(
            f"Search for '{query}' returned {len(releases)} releases",
            extra={"event": "prowlarr.search.completed", "query": query, "release_count": len(releases)},
        )
        return releases

    def _search(self, query: str) -> List[ReleaseCandidate]:
        self.require_configured()

        params: Dict[str, Any] = {
            "query": query,
            "type": "search",
            "limit": str(self.limit),
            "offset": "0",
        }
        for index, category in enumerate(self.categories):
            params[f"categories[{index}]"] = str(category)

        response = self._request(
            "GET",
            "api/v1/search",
            params=params,
            headers={"X-Api-Key": self.api_key, "Accept": "application/json"},
        )
        payload = self._json(response)
        if not isinstance(payload, list):
            raise CollaboratorResponseError(
                f"Unexpected search response type: {type(payload).__name__}",
                collaborator=self.name,
                status_code=response.status_code,
            )

        releases = []
        for item in payload:
            try:
                releases.append(self._to_candidate(item))
            except (ValidationError, KeyError, TypeError) as e:
                logger.warning(
                    "Skipping malformed release",
                    extra={
                        "event": "prowlarr.release.malformed",
                        "guid": item.get("guid") if isinstance(item, dict) else None,
                        "error": str(e),
                    },
                )
        return releases

    @staticmethod
    def _to_candidate(item: Dict[str, Any]) -> ReleaseCandidate:
        return ReleaseCandidate(
            guid=item["guid"],
            title=item["title"],
            size=item.get("size") or 0,
            seeders=item.get("seeders"),
            leechers=item.get("leechers"),
            indexer=item.get("indexer") or "",
            published_at=parse_iso_datetime(item.get("publishDate")),
            download_url=item.get("downloadUrl") or item.get("magnetUrl") or "",
        )
