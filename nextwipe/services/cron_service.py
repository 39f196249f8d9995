"""Force-refresh every tracked game through the public API.

The cron endpoint calls ``GET {base_url}/api/wipes/{game}?refresh=true``
for each game concurrently and reports every outcome; one game failing
never aborts the others.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import httpx
import structlog

from nextwipe.config.games import CRON_GAMES
from nextwipe.utils.concurrency import gather_settled

logger = structlog.get_logger(logger_name=__name__)

# A browser-backed scrape can take close to a minute.
_REFRESH_TIMEOUT = 120.0


class CronService:
    """Fan out refresh requests and collect all-settled results.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    base_url:
        Origin the API is reachable at (``NEXT_PUBLIC_BASE_URL``).
    games:
        Ids to refresh, in report order.
    concurrency:
        Maximum refreshes in flight.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        games: Sequence[str] = CRON_GAMES,
        concurrency: int = 8,
        timeout: float = _REFRESH_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._games = list(games)
        self._concurrency = max(1, concurrency)
        self._timeout = timeout

    @property
    def games(self) -> list[str]:
        return list(self._games)

    async def run(self) -> list[dict[str, Any]]:
        """Refresh every game; one result dict per game, in order."""
        logger.info("cron_started", games=len(self._games), concurrency=self._concurrency)
        semaphore = asyncio.Semaphore(self._concurrency)
        outcomes = await gather_settled([self._refresh(game) for game in self._games], semaphore)

        results: list[dict[str, Any]] = []
        for game, outcome in zip(self._games, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("cron_refresh_failed", game=game, error=str(outcome))
                results.append({"game": game, "status": "rejected", "success": False, "error": str(outcome)})
            else:
                results.append({"game": game, "status": "fulfilled", **outcome})

        fulfilled = sum(1 for r in results if r["status"] == "fulfilled")
        succeeded = sum(1 for r in results if r["success"])
        logger.info(
            "cron_finished",
            fulfilled=fulfilled,
            rejected=len(results) - fulfilled,
            succeeded=succeeded,
        )
        return results

    async def _refresh(self, game: str) -> dict[str, Any]:
        """Request one forced refresh; a non-2xx status is reported, not raised."""
        response = await self._http.get(
            f"{self._base_url}/api/wipes/{game}",
            params={"refresh": "true"},
            timeout=self._timeout,
        )
        success = response.is_success
        if not success:
            logger.warning("cron_refresh_unsuccessful", game=game, status_code=response.status_code)
        return {"success": success, "data": response.json()}
