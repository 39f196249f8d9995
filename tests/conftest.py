"""Shared pytest fixtures for the nextwipe test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from nextwipe.config.games import DEFAULT_GAMES, GameProfile
from nextwipe.interfaces.announcement_provider import Announcement, IAnnouncementProvider
from nextwipe.interfaces.page_provider import IPageProvider
from nextwipe.models.wipe import WipeData
from nextwipe.services.scraping.base import ScrapeContext
from nextwipe.services.scraping.registry import SourceProviders
from nextwipe.utils.dates import to_iso

# Tuesday; Rust's June force wipe (Thursday the 5th) has already happened.
FIXED_NOW = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fake sources
# ---------------------------------------------------------------------------


class FakeAnnouncementProvider(IAnnouncementProvider):
    """Serves canned posts per feed and records every request."""

    def __init__(self, name: str = "fake_feed", feeds: dict[str, list[Announcement] | None] | None = None) -> None:
        self._name = name
        self.feeds: dict[str, list[Announcement] | None] = feeds or {}
        self.calls: list[tuple[str, int, str]] = []

    async def fetch_announcements(
        self, feed: str, limit: int = 25, sort: str = "new"
    ) -> list[Announcement] | None:
        self.calls.append((feed, limit, sort))
        return self.feeds.get(feed)

    def get_provider_name(self) -> str:
        return self._name


class FakePageProvider(IPageProvider):
    """Serves canned HTML per URL; an Exception value is raised instead."""

    def __init__(self, name: str = "fake_pages", pages: dict[str, Any] | None = None) -> None:
        self._name = name
        self.pages: dict[str, Any] = pages or {}
        self.calls: list[dict[str, Any]] = []

    async def fetch_page(
        self,
        url: str,
        *,
        user_agent: str | None = None,
        headers: dict[str, str] | None = None,
        wait_ms: int = 0,
    ) -> str | None:
        self.calls.append({"url": url, "user_agent": user_agent, "headers": headers, "wait_ms": wait_ms})
        value = self.pages.get(url)
        if isinstance(value, Exception):
            raise value
        return value

    def get_provider_name(self) -> str:
        return self._name


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def profiles() -> dict[str, GameProfile]:
    return dict(DEFAULT_GAMES)


@pytest.fixture
def reddit_feed() -> FakeAnnouncementProvider:
    return FakeAnnouncementProvider("reddit")


@pytest.fixture
def steam_feed() -> FakeAnnouncementProvider:
    return FakeAnnouncementProvider("steam_news")


@pytest.fixture
def forum_feed() -> FakeAnnouncementProvider:
    return FakeAnnouncementProvider("discourse_forum")


@pytest.fixture
def static_pages() -> FakePageProvider:
    return FakePageProvider("http_page")


@pytest.fixture
def browser_pages() -> FakePageProvider:
    return FakePageProvider("browser")


@pytest.fixture
def source_providers(
    reddit_feed: FakeAnnouncementProvider,
    steam_feed: FakeAnnouncementProvider,
    forum_feed: FakeAnnouncementProvider,
    static_pages: FakePageProvider,
    browser_pages: FakePageProvider,
) -> SourceProviders:
    """Every source empty until a test fills in feeds or pages."""
    return SourceProviders(
        reddit=reddit_feed,
        steam=steam_feed,
        forum=forum_feed,
        pages=static_pages,
        browser_pages=browser_pages,
    )


@pytest.fixture
def make_context() -> Callable[..., ScrapeContext]:
    """Build a ``ScrapeContext`` for a game id at the fixed (or given) time."""

    def _make(game_id: str, now: datetime = FIXED_NOW) -> ScrapeContext:
        return ScrapeContext(profile=DEFAULT_GAMES[game_id], now=now)

    return _make


@pytest.fixture
def make_wipe() -> Callable[..., WipeData]:
    """Build a ``WipeData`` with sensible defaults; keyword overrides win."""

    def _make(**overrides: Any) -> WipeData:
        fields: dict[str, Any] = {
            "next_wipe": "2025-07-03T19:00:00.000Z",
            "last_wipe": "2025-06-05T19:00:00.000Z",
            "frequency": "Monthly (First Thursday at 7PM UTC)",
            "source": "rustforcewipe.com (calculated)",
            "scraped_at": to_iso(FIXED_NOW),
            "confirmed": True,
        }
        fields.update(overrides)
        return WipeData(**fields)

    return _make
