"""Page provider that renders pages in the shared headless browser."""

from __future__ import annotations

from playwright.async_api import Error as PlaywrightError

from nextwipe.interfaces.page_provider import IPageProvider
from nextwipe.providers.browser.browser_manager import BrowserManager
from nextwipe.utils.errors import SourceUnavailableError
from nextwipe.utils.logging import get_logger


class BrowserPageProvider(IPageProvider):
    """Fetch client-rendered pages through :class:`BrowserManager`.

    Navigation waits for ``domcontentloaded`` then sleeps ``wait_ms`` so
    countdown widgets and news lists have time to render.
    """

    def __init__(self, manager: BrowserManager, timeout_ms: int = 30000) -> None:
        self._manager = manager
        self._timeout_ms = timeout_ms
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "browser"

    async def fetch_page(
        self,
        url: str,
        *,
        user_agent: str | None = None,
        headers: dict[str, str] | None = None,
        wait_ms: int = 0,
    ) -> str | None:
        try:
            async with self._manager.page(user_agent=user_agent, headers=headers) as page:
                response = await page.goto(url, wait_until="domcontentloaded", timeout=self._timeout_ms)
                if response is not None and response.status >= 400:
                    self._logger.warning("browser_http_error", url=url, status=response.status)
                    return None
                if wait_ms:
                    await page.wait_for_timeout(wait_ms)
                html = await page.content()
        except SourceUnavailableError as exc:
            self._logger.warning("browser_unavailable", url=url, error=str(exc))
            return None
        except PlaywrightError as exc:
            self._logger.warning("browser_navigation_failed", url=url, error=str(exc))
            return None

        self._logger.debug("browser_page_fetched", url=url, size=len(html))
        return html
