"""Reusable scrape strategies.

Most games are covered by a handful of source shapes:

- **AnnouncementFeedStrategy** -- keyword-filtered posts from Reddit,
  Steam news or a Discourse forum, date-scanned one by one.
- **PageDateStrategy** -- a static or browser-rendered page (wiki, news
  listing) scanned for future dates, optionally only around an anchor
  such as ``Season 12``.
- **KnownScheduleStrategy** -- a date the publisher has already announced,
  valid only while it is still in the future.
- **ComputedStrategy** -- a pure function of "now" (Rust's first-Thursday
  rule and every estimate fallback).

Game-specific browser scrapers (Path of Exile, Fortnite) live in
:mod:`nextwipe.services.scraping.browser_games`.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Sequence

from bs4 import BeautifulSoup

from nextwipe.interfaces.announcement_provider import (
    Announcement,
    IAnnouncementProvider,
    search_announcements,
)
from nextwipe.interfaces.page_provider import IPageProvider
from nextwipe.models.wipe import SpecialEvent, WipeData
from nextwipe.services.scraping.base import ScrapeContext, ScrapeStrategy
from nextwipe.utils.dates import (
    add_days,
    days_until,
    extract_dates_from_text,
    extract_first_future_date,
    future_dates,
    parse_iso,
)
from nextwipe.utils.logging import get_logger

logger = get_logger(__name__)

_EXCLUDE_RADIUS = 100


def page_text(html: str) -> str:
    """Visible text of an HTML document, whitespace-collapsed."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return " ".join(soup.get_text(" ").split())


# ---------------------------------------------------------------------------
# Announcement feeds
# ---------------------------------------------------------------------------


class AnnouncementFeedStrategy(ScrapeStrategy):
    """Scan keyword-matching posts from a feed for an upcoming date.

    Parameters
    ----------
    provider:
        Feed to read (Reddit, Steam news, Discourse).
    feed:
        Subreddit, Steam app id or forum category URL.
    source:
        ``source`` value of the produced record.
    keywords / exclude:
        Passed to :func:`search_announcements`.
    date_scan:
        ``"earliest"`` takes the earliest future date among the dates
        between a week ago and a year ahead; ``"first"`` takes the first
        future date in the post's text order.
    min_days / max_days:
        Window override; defaults to the game profile's window.
    required_flair:
        Only posts whose flair contains this text (case-insensitive).
    recent_post_lead_days:
        When no post carries a usable date, a matching post published in
        the last week is taken as an announcement of a reset this many
        days after publication (``confirmed=False``).
    recent_post_source:
        ``source`` value used for such estimates.
    """

    def __init__(
        self,
        provider: IAnnouncementProvider,
        feed: str,
        *,
        source: str,
        keywords: Sequence[str],
        exclude: Sequence[str] = (),
        limit: int = 50,
        sort: str = "new",
        date_scan: str = "earliest",
        min_days: float | None = None,
        max_days: float | None = None,
        required_flair: str | None = None,
        recent_post_lead_days: int | None = None,
        recent_post_source: str | None = None,
        name: str | None = None,
    ) -> None:
        self._provider = provider
        self._feed = feed
        self._source = source
        self._keywords = list(keywords)
        self._exclude = list(exclude)
        self._limit = limit
        self._sort = sort
        self._date_scan = date_scan
        self._min_days = min_days
        self._max_days = max_days
        self._required_flair = required_flair.lower() if required_flair else None
        self._recent_post_lead_days = recent_post_lead_days
        self._recent_post_source = recent_post_source or source
        self.name = name or f"{provider.get_provider_name()}:{feed}"

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        posts = await self._provider.fetch_announcements(self._feed, limit=self._limit, sort=self._sort)
        if not posts:
            return None

        matches = [p for p in search_announcements(posts, self._keywords, self._exclude) if self._accepts(p)]
        logger.debug("feed_matches", strategy=self.name, game=ctx.profile.id, posts=len(posts), matches=len(matches))

        for post in matches:
            target = self._find_date(ctx, post)
            if target is None:
                continue
            if not ctx.in_window(target, self._min_days, self._max_days):
                logger.debug("feed_date_outside_window", strategy=self.name, date=target.isoformat())
                continue
            return self._build(ctx, post, target)

        if self._recent_post_lead_days is not None:
            return self._estimate_from_recent(ctx, matches)
        return None

    def _accepts(self, post: Announcement) -> bool:
        if self._required_flair is None:
            return True
        return self._required_flair in post.flair.lower()

    def _find_date(self, ctx: ScrapeContext, post: Announcement) -> datetime | None:
        hour = ctx.profile.release_hour_utc
        if self._date_scan == "first":
            return extract_first_future_date(post.text, hour, ctx.now)
        for candidate in extract_dates_from_text(post.text, hour, ctx.now):
            if candidate > ctx.now:
                return candidate
        return None

    def _build(self, ctx: ScrapeContext, post: Announcement, target: datetime) -> WipeData:
        return ctx.record(target, source=self._source, confirmed=True, announcement=post.title)

    def _estimate_from_recent(self, ctx: ScrapeContext, matches: list[Announcement]) -> WipeData | None:
        for post in matches:
            if post.published_at is None:
                continue
            age = -days_until(post.published_at, ctx.now)
            if not 0 <= age <= 7:
                continue
            estimate = post.published_at.replace(
                hour=ctx.profile.release_hour_utc, minute=0, second=0, microsecond=0
            )
            estimate = add_days(estimate, self._recent_post_lead_days or 0)
            if estimate > ctx.now:
                return ctx.record(
                    estimate,
                    source=self._recent_post_source,
                    confirmed=False,
                    announcement=post.title,
                )
        return None


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


class PageDateStrategy(ScrapeStrategy):
    """Find the next reset date on a web page.

    Without ``anchor`` the earliest future date anywhere on the page is
    used.  With ``anchor`` only the text within ``radius`` characters of
    each anchor match is scanned, and the first in-window date wins; the
    announcement is then ``announcement`` formatted with the anchor's
    groups (``"Diablo IV Season {0}"``).
    """

    def __init__(
        self,
        pages: IPageProvider,
        url: str,
        *,
        source: str,
        day_first: bool = False,
        require: str | None = None,
        anchor: str | None = None,
        radius: int = 500,
        exclude: Sequence[str] = (),
        announcement: str | None = None,
        wait_ms: int = 0,
        name: str | None = None,
    ) -> None:
        self._pages = pages
        self._url = url
        self._source = source
        self._day_first = day_first
        self._require = re.compile(require, re.IGNORECASE) if require else None
        self._anchor = re.compile(anchor, re.IGNORECASE) if anchor else None
        self._radius = radius
        self._exclude = [term.lower() for term in exclude]
        self._announcement = announcement
        self._wait_ms = wait_ms
        self.name = name or f"page:{url}"

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        html = await self._pages.fetch_page(self._url, wait_ms=self._wait_ms)
        if not html:
            return None
        text = page_text(html)

        if self._require is not None and not self._require.search(text):
            logger.debug("page_missing_required_text", strategy=self.name)
            return None

        if self._anchor is not None:
            return self._scan_anchors(ctx, text, self._anchor)

        dates = future_dates(text, ctx.profile.release_hour_utc, ctx.now, day_first=self._day_first)
        if not dates:
            return None
        target = min(dates)
        if not ctx.in_window(target):
            logger.debug("page_date_outside_window", strategy=self.name, date=target.isoformat())
            return None
        return ctx.record(target, source=self._source, confirmed=True, announcement=self._announcement)

    def _scan_anchors(self, ctx: ScrapeContext, text: str, anchor: re.Pattern[str]) -> WipeData | None:
        for match in anchor.finditer(text):
            nearby = text[max(0, match.start() - _EXCLUDE_RADIUS): match.end() + _EXCLUDE_RADIUS].lower()
            if any(term in nearby for term in self._exclude):
                continue
            snippet = text[max(0, match.start() - self._radius): match.end() + self._radius]
            target = extract_first_future_date(
                snippet, ctx.profile.release_hour_utc, ctx.now, day_first=self._day_first
            )
            if target is None or not ctx.in_window(target):
                continue
            announcement = (
                self._announcement.format(*match.groups()) if self._announcement else match.group(0)
            )
            return ctx.record(target, source=self._source, confirmed=True, announcement=announcement)
        return None


# ---------------------------------------------------------------------------
# Known dates and computed values
# ---------------------------------------------------------------------------


class KnownScheduleStrategy(ScrapeStrategy):
    """A publisher-announced date, used while it is still ahead of "now".

    When ``pages``/``url`` are given the page must still mention one of
    ``confirm_patterns`` for the date to be trusted.
    """

    def __init__(
        self,
        next_wipe: datetime,
        *,
        source: str,
        announcement: str | None = None,
        last_wipe: datetime | None = None,
        pages: IPageProvider | None = None,
        url: str | None = None,
        confirm_patterns: Sequence[str] = (),
        event_type: str | None = None,
        event_name: str | None = None,
        special_events: Sequence[SpecialEvent] = (),
        name: str = "known_schedule",
    ) -> None:
        self._next_wipe = next_wipe
        self._last_wipe = last_wipe
        self._source = source
        self._announcement = announcement
        self._pages = pages
        self._url = url
        self._patterns = [re.compile(p, re.IGNORECASE) for p in confirm_patterns]
        self._event_type = event_type
        self._event_name = event_name
        self._special_events = list(special_events)
        self.name = name

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        if self._next_wipe <= ctx.now:
            return None

        if self._pages is not None and self._url:
            html = await self._pages.fetch_page(self._url)
            if not html:
                return None
            if self._patterns and not any(p.search(html) for p in self._patterns):
                return None

        upcoming = [e for e in self._special_events if (parse_iso(e.date) or ctx.now) >= ctx.now]
        return ctx.record(
            self._next_wipe,
            last_wipe=self._last_wipe,
            source=self._source,
            confirmed=True,
            announcement=self._announcement,
            event_type=self._event_type,
            event_name=self._event_name,
            special_events=upcoming or None,
        )


class ComputedStrategy(ScrapeStrategy):
    """Wrap a pure ``ScrapeContext -> WipeData`` function."""

    def __init__(self, compute: Callable[[ScrapeContext], WipeData], name: str = "estimate") -> None:
        self._compute = compute
        self.name = name

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        return self._compute(ctx)
