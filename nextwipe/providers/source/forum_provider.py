"""Discourse forum provider.

Discourse exposes every category as JSON by appending ``.json`` to its URL
(``https://forum.lastepoch.com/c/announcements/37.json``).  Only topic
titles and timestamps are used; topic bodies would need one request each.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

import httpx

from nextwipe.interfaces.announcement_provider import Announcement, IAnnouncementProvider
from nextwipe.utils.dates import parse_iso
from nextwipe.utils.logging import get_logger


class DiscourseForumProvider(IAnnouncementProvider):
    """Announcement feed for a Discourse category; ``feed`` is the category JSON URL."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_agent: str = "NextWipeTime/1.0",
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "discourse_forum"

    async def fetch_announcements(
        self,
        feed: str,
        limit: int = 30,
        sort: str = "new",
    ) -> list[Announcement] | None:
        try:
            response = await self._http.get(
                feed, headers={"User-Agent": self._user_agent}, timeout=self._timeout
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            self._logger.warning("forum_request_failed", url=feed, error=str(exc))
            return None
        except ValueError as exc:
            self._logger.warning("forum_invalid_json", url=feed, error=str(exc))
            return None

        topics = ((payload or {}).get("topic_list") or {}).get("topics") or []
        origin = "{0.scheme}://{0.netloc}".format(urlsplit(feed))
        posts = [self._to_announcement(topic, origin) for topic in topics[:limit]]
        self._logger.info("forum_topics_fetched", url=feed, count=len(posts))
        return posts

    @staticmethod
    def _to_announcement(topic: dict[str, Any], origin: str) -> Announcement:
        slug = topic.get("slug")
        topic_id = topic.get("id")
        return Announcement(
            title=topic.get("title") or "",
            published_at=parse_iso(topic.get("created_at") or topic.get("bumped_at")),
            url=f"{origin}/t/{slug}/{topic_id}" if slug and topic_id else "",
            stickied=bool(topic.get("pinned")),
        )
