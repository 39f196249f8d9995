"""Headless-browser providers (Playwright Chromium)."""

from nextwipe.providers.browser.browser_manager import BrowserManager
from nextwipe.providers.browser.browser_page_provider import BrowserPageProvider

__all__ = ["BrowserManager", "BrowserPageProvider"]
