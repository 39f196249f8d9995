"""Run a game's ordered strategy list until one produces a record."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

import structlog

from nextwipe.config.games import GameProfile
from nextwipe.models.wipe import WipeData
from nextwipe.services.scraping.base import ScrapeContext, ScrapeStrategy
from nextwipe.utils.dates import utc_now
from nextwipe.utils.errors import ScrapeError

logger = structlog.get_logger(logger_name=__name__)


class GameScraper:
    """Per-game scraper: official source, then community, then fallback.

    Parameters
    ----------
    profile:
        The game's scheduling facts.
    strategies:
        Tried in order; the first non-``None`` record wins.
    clock:
        Returns "now"; injected by tests.
    """

    def __init__(
        self,
        profile: GameProfile,
        strategies: Sequence[ScrapeStrategy],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._profile = profile
        self._strategies = list(strategies)
        self._clock = clock

    @property
    def profile(self) -> GameProfile:
        return self._profile

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    async def scrape(self) -> WipeData:
        """Return the first record any strategy produces.

        Raises
        ------
        ScrapeError
            When every strategy returned ``None`` or failed.
        """
        ctx = ScrapeContext(profile=self._profile, now=self._clock())
        game = self._profile.id

        for strategy in self._strategies:
            try:
                result = await strategy.attempt(ctx)
            except Exception as exc:  # a broken source must not stop the chain
                logger.warning(
                    "scrape_strategy_failed",
                    game=game,
                    strategy=strategy.name,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue

            if result is None:
                logger.debug("scrape_strategy_empty", game=game, strategy=strategy.name)
                continue

            logger.info(
                "scrape_strategy_succeeded",
                game=game,
                strategy=strategy.name,
                next_wipe=result.next_wipe,
                confirmed=result.confirmed,
            )
            return result

        logger.error("scrape_exhausted", game=game, strategies=self.strategy_names)
        raise ScrapeError(
            message=f"All sources exhausted for {self._profile.name}",
            provider_name=game,
        )
