"""Abstract base class for announcement feeds (Reddit, Steam news, forums).

Every feed the scrapers read boils down to a list of titled posts with an
optional body and a publication time.  Providers normalise their upstream
JSON into :class:`Announcement` so the scrape strategies can filter and
date-scan them the same way regardless of origin.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Announcement:
    """One post from an announcement feed.

    Attributes
    ----------
    title:
        Post or news headline.
    body:
        Self-text / news contents; empty when the feed has none.
    author:
        Posting account, when the feed exposes one.
    published_at:
        Publication time (UTC) if known.
    url:
        Link to the post.
    stickied:
        Pinned by moderators (Reddit only).
    flair:
        Link flair text (Reddit only).
    """

    title: str
    body: str = ""
    author: str = ""
    published_at: datetime | None = None
    url: str = ""
    stickied: bool = False
    flair: str = ""

    @property
    def text(self) -> str:
        return f"{self.title} {self.body}"


def search_announcements(
    posts: list[Announcement],
    keywords: list[str],
    exclude: list[str] | None = None,
) -> list[Announcement]:
    """Keep posts mentioning any keyword and none of the excluded terms.

    Matching is a case-insensitive substring test over title and body.
    """
    exclude = exclude or []
    lowered_keywords = [k.lower() for k in keywords]
    lowered_exclude = [k.lower() for k in exclude]

    kept: list[Announcement] = []
    for post in posts:
        content = post.text.lower()
        if any(term in content for term in lowered_exclude):
            continue
        if any(term in content for term in lowered_keywords):
            kept.append(post)
    return kept


class IAnnouncementProvider(ABC):
    """Contract for services that list recent announcements from one feed."""

    @abstractmethod
    async def fetch_announcements(
        self,
        feed: str,
        limit: int = 25,
        sort: str = "new",
    ) -> list[Announcement] | None:
        """Fetch the newest announcements from *feed*.

        Parameters
        ----------
        feed:
            Provider-specific feed id: a subreddit name, a Steam app id,
            or a forum category URL.
        limit:
            Maximum number of posts to request.
        sort:
            Listing order where the feed supports one (``new``, ``hot``,
            ``top``, ``rising``).

        Returns
        -------
        list[Announcement] or None
            ``None`` when the feed could not be fetched (network error,
            timeout, non-2xx).  Never raises.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider name used in logs and ``source`` strings."""
