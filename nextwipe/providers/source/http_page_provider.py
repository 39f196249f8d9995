"""Static HTML page provider (wikis, publisher news pages, RSS feeds)."""

from __future__ import annotations

import httpx

from nextwipe.interfaces.page_provider import IPageProvider
from nextwipe.utils.logging import get_logger


class HttpPageProvider(IPageProvider):
    """Fetch pages with a plain GET on the shared ``httpx.AsyncClient``."""

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
        return "http_page"

    async def fetch_page(
        self,
        url: str,
        *,
        user_agent: str | None = None,
        headers: dict[str, str] | None = None,
        wait_ms: int = 0,
    ) -> str | None:
        request_headers = {"User-Agent": user_agent or self._user_agent}
        request_headers.update(headers or {})
        try:
            response = await self._http.get(
                url, headers=request_headers, timeout=self._timeout, follow_redirects=True
            )
        except httpx.HTTPError as exc:
            self._logger.warning("page_request_failed", url=url, error=str(exc))
            return None

        if not 200 <= response.status_code < 300:
            self._logger.warning("page_http_error", url=url, status=response.status_code)
            return None

        self._logger.debug("page_fetched", url=url, size=len(response.text))
        return response.text
