"""Unit tests for the reusable scrape strategies."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from nextwipe.interfaces.announcement_provider import Announcement
from nextwipe.models.wipe import SpecialEvent
from nextwipe.services.scraping.strategies import (
    AnnouncementFeedStrategy,
    ComputedStrategy,
    KnownScheduleStrategy,
    PageDateStrategy,
    page_text,
)

FILLER = "filler " * 100


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_page_text_drops_scripts_and_collapses_whitespace() -> None:
    html = "<html><script>var d='July 1';</script><p>Season\n\n  12</p><style>p{}</style></html>"
    assert page_text(html) == "Season 12"


# ======================================================================
# AnnouncementFeedStrategy
# ======================================================================


class TestAnnouncementFeedStrategy:
    def _strategy(self, feed_provider, **options) -> AnnouncementFeedStrategy:
        defaults = {
            "source": "r/diablo4",
            "keywords": ["season"],
            "exclude": ["ptr"],
        }
        defaults.update(options)
        return AnnouncementFeedStrategy(feed_provider, "diablo4", **defaults)

    @pytest.mark.asyncio
    async def test_uses_earliest_future_date(self, reddit_feed, make_context) -> None:
        reddit_feed.feeds["diablo4"] = [
            Announcement(title="Season 12 announced", body="Launches August 20. Roadmap for October 1."),
        ]

        result = await self._strategy(reddit_feed).attempt(make_context("diablo4"))

        assert result is not None
        assert result.next_wipe == "2025-08-20T18:00:00.000Z"
        assert result.last_wipe == "2025-05-20T18:00:00.000Z"
        assert result.confirmed is True
        assert result.source == "r/diablo4"
        assert result.announcement == "Season 12 announced"
        assert result.scraped_at == "2025-06-10T12:00:00.000Z"

    @pytest.mark.asyncio
    async def test_requests_feed_with_limit_and_sort(self, reddit_feed, make_context) -> None:
        await self._strategy(reddit_feed, limit=25, sort="hot").attempt(make_context("diablo4"))
        assert reddit_feed.calls == [("diablo4", 25, "hot")]

    @pytest.mark.asyncio
    async def test_excluded_and_unrelated_posts_are_skipped(self, reddit_feed, make_context) -> None:
        reddit_feed.feeds["diablo4"] = [
            Announcement(title="PTR for the new season opens July 1"),
            Announcement(title="My barbarian build, August 2"),
        ]
        assert await self._strategy(reddit_feed).attempt(make_context("diablo4")) is None

    @pytest.mark.asyncio
    async def test_date_outside_window_is_skipped(self, reddit_feed, make_context) -> None:
        reddit_feed.feeds["diablo4"] = [
            Announcement(title="Season hotfix lands June 12"),
            Announcement(title="Season 12 on July 22"),
        ]
        result = await self._strategy(reddit_feed).attempt(make_context("diablo4"))
        assert result is not None
        assert result.next_wipe == "2025-07-22T18:00:00.000Z"

    @pytest.mark.asyncio
    async def test_missing_feed_returns_none(self, reddit_feed, make_context) -> None:
        assert await self._strategy(reddit_feed).attempt(make_context("diablo4")) is None

    @pytest.mark.asyncio
    async def test_required_flair(self, reddit_feed, make_context) -> None:
        reddit_feed.feeds["diablo4"] = [
            Announcement(title="Season rumour: July 22", flair="Discussion"),
            Announcement(title="Season 12 date: August 5", flair="News"),
        ]
        strategy = self._strategy(reddit_feed, required_flair="news")
        result = await strategy.attempt(make_context("diablo4"))
        assert result.next_wipe == "2025-08-05T18:00:00.000Z"

    @pytest.mark.asyncio
    async def test_first_scan_respects_text_order(self, reddit_feed, make_context) -> None:
        reddit_feed.feeds["diablo4"] = [
            Announcement(title="Season 12", body="Starts August 5; the PTB closed June 20."),
        ]
        strategy = self._strategy(reddit_feed, exclude=[], date_scan="first", min_days=1)
        result = await strategy.attempt(make_context("diablo4"))
        assert result.next_wipe == "2025-08-05T18:00:00.000Z"

        earliest = self._strategy(reddit_feed, exclude=[], min_days=1)
        result = await earliest.attempt(make_context("diablo4"))
        assert result.next_wipe == "2025-06-20T18:00:00.000Z"

    @pytest.mark.asyncio
    async def test_recent_post_estimate(self, forum_feed, make_context) -> None:
        feed = "https://forum.lastepoch.com/c/announcements/37.json"
        forum_feed.feeds[feed] = [
            Announcement(title="New cycle coming soon", published_at=_utc(2025, 6, 8, 9, 30)),
        ]
        strategy = AnnouncementFeedStrategy(
            forum_feed,
            feed,
            source="forum.lastepoch.com (Official)",
            keywords=["cycle"],
            date_scan="first",
            recent_post_lead_days=14,
            recent_post_source="forum.lastepoch.com (Estimated from recent announcement)",
        )

        result = await strategy.attempt(make_context("lastepoch"))

        assert result.next_wipe == "2025-06-22T17:00:00.000Z"
        assert result.confirmed is False
        assert result.source == "forum.lastepoch.com (Estimated from recent announcement)"
        assert result.announcement == "New cycle coming soon"

    @pytest.mark.asyncio
    async def test_old_post_gives_no_estimate(self, forum_feed, make_context) -> None:
        forum_feed.feeds["f"] = [Announcement(title="New cycle", published_at=_utc(2025, 5, 1))]
        strategy = AnnouncementFeedStrategy(
            forum_feed, "f", source="forum", keywords=["cycle"], recent_post_lead_days=14
        )
        assert await strategy.attempt(make_context("lastepoch")) is None

    def test_default_name(self, reddit_feed) -> None:
        strategy = AnnouncementFeedStrategy(reddit_feed, "rust", source="r/rust", keywords=["wipe"])
        assert strategy.name == "reddit:rust"


# ======================================================================
# PageDateStrategy
# ======================================================================


class TestPageDateStrategy:
    URL = "https://valorant.fandom.com/wiki/Act"

    @pytest.mark.asyncio
    async def test_earliest_future_date(self, static_pages, make_context) -> None:
        static_pages.pages[self.URL] = (
            "<table><tr><td>Act 3</td><td>20 August 2025</td></tr>"
            "<tr><td>Act 2</td><td>25 June 2025</td></tr>"
            "<tr><td>Act 1</td><td>8 January 2025</td></tr></table>"
        )
        strategy = PageDateStrategy(static_pages, self.URL, source="valorant.fandom.com", day_first=True)

        result = await strategy.attempt(make_context("valorant"))

        assert result.next_wipe == "2025-06-25T21:00:00.000Z"
        assert result.last_wipe == "2025-04-26T21:00:00.000Z"
        assert result.confirmed is True
        assert result.source == "valorant.fandom.com"

    @pytest.mark.asyncio
    async def test_earliest_date_outside_window(self, static_pages, make_context) -> None:
        static_pages.pages[self.URL] = "<p>Next act: 11 June 2025</p>"
        strategy = PageDateStrategy(static_pages, self.URL, source="wiki", day_first=True)
        assert await strategy.attempt(make_context("valorant")) is None

    @pytest.mark.asyncio
    async def test_required_text_missing(self, static_pages, make_context) -> None:
        static_pages.pages["https://www.ea.com/games/apex-legends/news"] = "<p>Season 26 recap, July 1</p>"
        strategy = PageDateStrategy(
            static_pages,
            "https://www.ea.com/games/apex-legends/news",
            source="ea.com",
            require=r"Season\s+(27|28|29)",
        )
        assert await strategy.attempt(make_context("apex")) is None

    @pytest.mark.asyncio
    async def test_page_unavailable(self, static_pages, make_context) -> None:
        strategy = PageDateStrategy(static_pages, self.URL, source="wiki")
        assert await strategy.attempt(make_context("valorant")) is None

    @pytest.mark.asyncio
    async def test_anchor_skips_excluded_mentions(self, static_pages, make_context) -> None:
        url = "https://news.blizzard.com/en-us/feed/diablo-4"
        static_pages.pages[url] = (
            f"<p>The PTR for Season 12 opens June 17, 2025.</p><p>{FILLER}</p>"
            "<p>Diablo IV Season 12 launches July 15, 2025.</p>"
        )
        strategy = PageDateStrategy(
            static_pages,
            url,
            source="news.blizzard.com (Official)",
            anchor=r"(?:Diablo(?:\s+IV)?\s+)?Season\s+(\d+)",
            exclude=["ptr"],
            announcement="Diablo IV Season {0}",
        )

        result = await strategy.attempt(make_context("diablo4"))

        assert result.next_wipe == "2025-07-15T18:00:00.000Z"
        assert result.announcement == "Diablo IV Season 12"

    @pytest.mark.asyncio
    async def test_anchor_without_template_uses_match(self, browser_pages, make_context) -> None:
        url = "https://overwatch.blizzard.com/en-us/news/"
        browser_pages.pages[url] = "<p>Season 18 arrives July 8</p>"
        strategy = PageDateStrategy(browser_pages, url, source=url, anchor=r"\bseason\s+(\d+)", wait_ms=3000)

        result = await strategy.attempt(make_context("overwatch2"))

        assert result.announcement == "Season 18"
        assert browser_pages.calls[0]["wait_ms"] == 3000

    @pytest.mark.asyncio
    async def test_anchor_ignores_dates_far_from_every_match(self, static_pages, make_context) -> None:
        url = "https://www.bungie.net/7/en/News"
        static_pages.pages[url] = f"<p>Community event June 20, 2025.</p><p>{FILLER}</p><p>Episode 3 is coming soon.</p>"
        strategy = PageDateStrategy(static_pages, url, source=url, anchor=r"\bepisode\s+(\d+)")

        assert await strategy.attempt(make_context("destiny2")) is None


# ======================================================================
# KnownScheduleStrategy / ComputedStrategy
# ======================================================================


class TestKnownScheduleStrategy:
    URL = "https://www.millenium.org/news/428375.html"

    def _strategy(self, pages=None, **options) -> KnownScheduleStrategy:
        return KnownScheduleStrategy(
            _utc(2025, 12, 9, 18),
            last_wipe=_utc(2025, 9, 23, 17),
            source="Millenium.org (Gaming News)",
            announcement="Diablo IV Season 11",
            event_type="season",
            pages=pages,
            url=self.URL if pages is not None else None,
            **options,
        )

    @pytest.mark.asyncio
    async def test_confirmed_while_page_mentions_it(self, static_pages, make_context) -> None:
        static_pages.pages[self.URL] = "<h1>La Saison 11 arrive le 9 décembre</h1><p>Season 11</p>"
        strategy = self._strategy(static_pages, confirm_patterns=[r"Season\s+11"])

        result = await strategy.attempt(make_context("diablo4"))

        assert result.next_wipe == "2025-12-09T18:00:00.000Z"
        assert result.last_wipe == "2025-09-23T17:00:00.000Z"
        assert result.confirmed is True
        assert result.event_type == "season"

    @pytest.mark.asyncio
    async def test_page_without_pattern(self, static_pages, make_context) -> None:
        static_pages.pages[self.URL] = "<p>Unrelated article</p>"
        strategy = self._strategy(static_pages, confirm_patterns=[r"Season\s+11"])
        assert await strategy.attempt(make_context("diablo4")) is None

    @pytest.mark.asyncio
    async def test_passed_date_is_never_served(self, static_pages, make_context) -> None:
        strategy = self._strategy(static_pages)
        assert await strategy.attempt(make_context("diablo4", now=_utc(2025, 12, 10))) is None
        assert static_pages.calls == []

    @pytest.mark.asyncio
    async def test_only_upcoming_special_events(self, make_context) -> None:
        events = [
            SpecialEvent(name="Reveal", date="2025-11-16T00:00:00.000Z", type="reveal"),
            SpecialEvent(name="PBE", date="2025-11-18T18:00:00.000Z", type="beta"),
        ]
        strategy = self._strategy(special_events=events)

        result = await strategy.attempt(make_context("tft", now=_utc(2025, 11, 17)))

        assert [e.name for e in result.special_events] == ["PBE"]

    @pytest.mark.asyncio
    async def test_no_special_events_left(self, make_context) -> None:
        events = [SpecialEvent(name="Reveal", date="2025-11-16T00:00:00.000Z", type="reveal")]
        result = await self._strategy(special_events=events).attempt(
            make_context("tft", now=_utc(2025, 11, 20))
        )
        assert result.special_events is None


@pytest.mark.asyncio
async def test_computed_strategy_wraps_function(make_context) -> None:
    ctx = make_context("rust")
    strategy = ComputedStrategy(
        lambda c: c.record(_utc(2025, 7, 3, 19), source="calc", confirmed=True), name="calc"
    )
    result = await strategy.attempt(ctx)
    assert strategy.name == "calc"
    assert result.next_wipe == "2025-07-03T19:00:00.000Z"
