"""Owned headless-browser resource.

A single Chromium instance serves every browser-backed scraper in the
process.  The manager launches it lazily on first use, checks it is still
connected before handing it out, relaunches it after a crash, and yields
pages through :meth:`BrowserManager.page`, which always closes the page's
context on exit (success, exception or cancellation).

Two launch profiles exist:

* **development** (``NODE_ENV=development``) -- the locally installed
  Playwright Chromium with sandbox-disabling flags.
* **serverless** (anything else) -- a lean single-process profile, with an
  optional ``CHROMIUM_EXECUTABLE_PATH`` pointing at a slim Chromium build.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from nextwipe.utils.errors import SourceUnavailableError
from nextwipe.utils.logging import get_logger

_DEV_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]

_SERVERLESS_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--single-process",
]


class BrowserManager:
    """Lazily launched, health-checked Chromium shared by the process.

    Parameters
    ----------
    dev_mode:
        Use the development launch profile.
    executable_path:
        Chromium binary for the serverless profile; empty uses Playwright's
        bundled build.
    playwright_factory:
        Callable returning a Playwright context manager.  Tests inject a
        fake here.
    """

    def __init__(
        self,
        dev_mode: bool = False,
        executable_path: str = "",
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self._dev_mode = dev_mode
        self._executable_path = executable_path
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()
        self._launch_count = 0
        self._logger = get_logger(__name__)

    @property
    def launch_count(self) -> int:
        """How many times a browser has been launched (relaunches included)."""
        return self._launch_count

    def launch_options(self) -> dict[str, Any]:
        if self._dev_mode:
            return {"headless": True, "args": list(_DEV_ARGS)}
        options: dict[str, Any] = {"headless": True, "args": list(_SERVERLESS_ARGS)}
        if self._executable_path:
            options["executable_path"] = self._executable_path
        return options

    # -- Lifecycle -------------------------------------------------------------

    async def acquire(self) -> Browser:
        """Return a connected browser, launching or relaunching as needed.

        Raises
        ------
        SourceUnavailableError
            If Chromium cannot be launched.
        """
        async with self._lock:
            if self._browser is not None:
                if self._browser.is_connected():
                    return self._browser
                self._logger.warning("browser_disconnected", launches=self._launch_count)
                await self._teardown_browser()

            return await self._launch()

    async def _launch(self) -> Browser:
        options = self.launch_options()
        try:
            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(**options)
        except PlaywrightError as exc:
            self._logger.error("browser_launch_failed", error=str(exc), dev_mode=self._dev_mode)
            await self._teardown_browser()
            raise SourceUnavailableError(
                message=f"Chromium launch failed: {exc}",
                provider_name="browser",
            ) from exc

        self._launch_count += 1
        self._logger.info(
            "browser_launched",
            dev_mode=self._dev_mode,
            executable_path=options.get("executable_path", "bundled"),
            launches=self._launch_count,
        )
        return self._browser

    async def restart(self) -> None:
        """Drop the current browser; the next :meth:`acquire` relaunches it."""
        async with self._lock:
            await self._teardown_browser()

    async def close(self) -> None:
        """Close the browser and stop Playwright.  Safe to call repeatedly."""
        async with self._lock:
            await self._teardown_browser()
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except PlaywrightError as exc:
                    self._logger.warning("playwright_stop_failed", error=str(exc))
                self._playwright = None
        self._logger.info("browser_closed")

    async def _teardown_browser(self) -> None:
        if self._browser is None:
            return
        browser, self._browser = self._browser, None
        try:
            await browser.close()
        except PlaywrightError as exc:
            # Already gone after a crash.
            self._logger.debug("browser_close_failed", error=str(exc))

    # -- Pages -----------------------------------------------------------------

    @asynccontextmanager
    async def page(
        self,
        user_agent: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[Page]:
        """Yield a fresh page in its own browser context.

        The context (and with it the page) is closed when the block exits.
        """
        browser = await self.acquire()
        context_options: dict[str, Any] = {}
        if user_agent:
            context_options["user_agent"] = user_agent
        if headers:
            context_options["extra_http_headers"] = headers

        try:
            context = await browser.new_context(**context_options)
        except PlaywrightError as exc:
            self._logger.warning("browser_context_failed", error=str(exc))
            await self.restart()
            raise SourceUnavailableError(
                message=f"Could not open browser context: {exc}",
                provider_name="browser",
            ) from exc

        try:
            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
            except PlaywrightError as exc:
                self._logger.debug("browser_context_close_failed", error=str(exc))
