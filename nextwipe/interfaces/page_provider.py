"""Abstract base class for HTML page fetchers.

Two implementations exist: a plain httpx GET for static pages (wikis,
publisher news, RSS) and a headless-browser navigation for pages that only
render their dates client-side.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IPageProvider(ABC):
    """Contract for services that return the HTML of a web page."""

    @abstractmethod
    async def fetch_page(
        self,
        url: str,
        *,
        user_agent: str | None = None,
        headers: dict[str, str] | None = None,
        wait_ms: int = 0,
    ) -> str | None:
        """Fetch *url* and return its HTML.

        Parameters
        ----------
        url:
            Page to load.
        user_agent:
            Override the default User-Agent for this request.
        headers:
            Extra request headers.
        wait_ms:
            Settle time after load for client-rendered content.  Ignored by
            static fetchers.

        Returns
        -------
        str or None
            Page HTML, or ``None`` on network failure, timeout or non-2xx.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider name used in logs."""
