"""Steam News API provider (``ISteamNews/GetNewsForApp/v2``)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from nextwipe.interfaces.announcement_provider import Announcement, IAnnouncementProvider
from nextwipe.utils.logging import get_logger

_NEWS_URL = "https://api.steampowered.com/ISteamNews/GetNewsForApp/v2/"
_MAX_LENGTH = 5000


class SteamNewsProvider(IAnnouncementProvider):
    """Announcement feed for one Steam app id.

    ``feed`` is the numeric app id (``"578080"`` for PUBG).  ``sort`` is
    ignored; Steam returns newest first.
    """

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._http = http_client
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "steam_news"

    async def fetch_announcements(
        self,
        feed: str,
        limit: int = 10,
        sort: str = "new",
    ) -> list[Announcement] | None:
        params = {"appid": feed, "count": str(limit), "maxlength": str(_MAX_LENGTH), "format": "json"}
        try:
            response = await self._http.get(_NEWS_URL, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            self._logger.warning("steam_news_request_failed", app_id=feed, error=str(exc))
            return None
        except ValueError as exc:
            self._logger.warning("steam_news_invalid_json", app_id=feed, error=str(exc))
            return None

        items = ((payload or {}).get("appnews") or {}).get("newsitems") or []
        news = [self._to_announcement(item) for item in items]
        self._logger.info("steam_news_fetched", app_id=feed, count=len(news))
        return news

    @staticmethod
    def _to_announcement(item: dict[str, Any]) -> Announcement:
        stamp = item.get("date")
        return Announcement(
            title=item.get("title") or "",
            body=item.get("contents") or "",
            author=item.get("author") or "",
            published_at=(
                datetime.fromtimestamp(stamp, tz=timezone.utc) if isinstance(stamp, (int, float)) else None
            ),
            url=item.get("url") or "",
        )
