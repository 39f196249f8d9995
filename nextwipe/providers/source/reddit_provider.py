"""Reddit listing provider.

Reads ``https://old.reddit.com/r/<sub>/<sort>.json`` (old.reddit is more
lenient with unauthenticated clients) and normalises each post into an
:class:`Announcement`.  Every request the provider makes goes through one
:class:`RateGate`, so consecutive requests are at least two seconds apart
regardless of which subreddit or game asked.

HTTP errors are never raised: a 429, a non-2xx status, a timeout or an
unparsable body all return ``None``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from nextwipe.interfaces.announcement_provider import Announcement, IAnnouncementProvider
from nextwipe.utils.concurrency import RateGate
from nextwipe.utils.logging import get_logger

_BASE_URL = "https://old.reddit.com"
_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
_VALID_SORTS = frozenset({"hot", "new", "top", "rising"})
_MIN_REQUEST_INTERVAL = 2.0  # seconds, shared by every subreddit


class RedditProvider(IAnnouncementProvider):
    """Announcement feed backed by subreddit JSON listings.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    rate_gate:
        Gate enforcing the minimum delay between Reddit requests.  Defaults
        to a two-second gate owned by this provider.
    timeframe:
        ``t`` parameter sent with ``top`` listings.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rate_gate: RateGate | None = None,
        timeframe: str = "week",
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._gate = rate_gate if rate_gate is not None else RateGate(_MIN_REQUEST_INTERVAL, name="reddit")
        self._timeframe = timeframe
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "reddit"

    async def fetch_announcements(
        self,
        feed: str,
        limit: int = 25,
        sort: str = "new",
    ) -> list[Announcement] | None:
        if sort not in _VALID_SORTS:
            sort = "new"

        url = f"{_BASE_URL}/r/{feed}/{sort}.json"
        params = {"limit": str(limit)}
        if sort == "top" and self._timeframe:
            params["t"] = self._timeframe

        headers = {
            "User-Agent": _BROWSER_USER_AGENT,
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": f"{_BASE_URL}/",
        }

        await self._gate.wait()
        self._logger.debug("reddit_fetch", subreddit=feed, sort=sort, limit=limit)
        try:
            response = await self._http.get(
                url, params=params, headers=headers, timeout=self._timeout, follow_redirects=True
            )
        except httpx.HTTPError as exc:
            self._logger.warning("reddit_request_failed", subreddit=feed, error=str(exc))
            return None

        if response.status_code == 429:
            self._logger.warning("reddit_rate_limited", subreddit=feed)
            return None
        if not 200 <= response.status_code < 300:
            self._logger.warning("reddit_http_error", subreddit=feed, status=response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            self._logger.warning("reddit_invalid_json", subreddit=feed, error=str(exc))
            return None

        children = ((payload or {}).get("data") or {}).get("children") or []
        posts = [self._to_announcement(child.get("data") or {}) for child in children]
        self._logger.info("reddit_posts_fetched", subreddit=feed, count=len(posts))
        return posts

    @staticmethod
    def _to_announcement(data: dict[str, Any]) -> Announcement:
        created = data.get("created_utc")
        published_at = (
            datetime.fromtimestamp(float(created), tz=timezone.utc)
            if isinstance(created, (int, float))
            else None
        )
        permalink = data.get("permalink") or ""
        return Announcement(
            title=data.get("title") or "",
            body=data.get("selftext") or "",
            author=data.get("author") or "",
            published_at=published_at,
            url=f"{_BASE_URL}{permalink}" if permalink.startswith("/") else (data.get("url") or ""),
            stickied=bool(data.get("stickied")),
            flair=data.get("link_flair_text") or "",
        )
