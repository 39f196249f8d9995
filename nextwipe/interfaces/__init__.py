"""Public interface definitions for every outbound source and the cache store.

Scrape strategies and services depend only on these contracts; concrete
adapters live in ``nextwipe/providers/`` and are wired in ``nextwipe/main.py``.

    Interface               →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    IAnnouncementProvider   →  RedditProvider, SteamNewsProvider,
                               DiscourseForumProvider
    IPageProvider           →  HttpPageProvider, BrowserPageProvider
    IWipeCacheProvider      →  JsonFileCacheProvider, MemoryCacheProvider
"""

from nextwipe.interfaces.announcement_provider import (
    Announcement,
    IAnnouncementProvider,
    search_announcements,
)
from nextwipe.interfaces.cache_provider import IWipeCacheProvider
from nextwipe.interfaces.page_provider import IPageProvider

__all__ = [
    "Announcement",
    "IAnnouncementProvider",
    "IPageProvider",
    "IWipeCacheProvider",
    "search_announcements",
]
