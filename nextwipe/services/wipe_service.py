"""Cache-first lookup of one game's wipe record.

The flow for ``get_wipe(game_id)``:

1. Unknown id → :class:`UnknownGameError`.
2. Unless forced, read the cache and validate it with the smart duration
   for the record's type.  A valid record is returned with
   ``from_cache=True`` and its age in minutes.
3. Otherwise scrape, write the cache and return with ``from_cache=False``.
4. If scraping fails, fall back to whatever is cached (``stale=True``), or
   raise :class:`WipeDataUnavailableError` when nothing is.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Mapping

import structlog

from nextwipe.config.games import GameProfile
from nextwipe.interfaces.cache_provider import IWipeCacheProvider
from nextwipe.models.wipe import WipeData, WipeResponse
from nextwipe.services.cache_validator import cache_age, get_smart_cache_duration, validate_cached_data
from nextwipe.services.scraping.scraper import GameScraper
from nextwipe.utils.dates import utc_now
from nextwipe.utils.errors import UnknownGameError, WipeDataUnavailableError

logger = structlog.get_logger(logger_name=__name__)

STALE_ERROR = "Failed to fetch fresh data"


class WipeService:
    """Serve wipe records from the cache store, scraping when stale.

    Parameters
    ----------
    profiles:
        Game table keyed by id; defines which ids exist.
    scrapers:
        One :class:`GameScraper` per id.
    cache:
        Cache store backend.
    clock:
        Returns "now"; injected by tests.
    """

    def __init__(
        self,
        profiles: Mapping[str, GameProfile],
        scrapers: Mapping[str, GameScraper],
        cache: IWipeCacheProvider,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._profiles = dict(profiles)
        self._scrapers = dict(scrapers)
        self._cache = cache
        self._clock = clock

    @property
    def profiles(self) -> dict[str, GameProfile]:
        return dict(self._profiles)

    def get_profile(self, game_id: str) -> GameProfile:
        profile = self._profiles.get(game_id)
        if profile is None or game_id not in self._scrapers:
            raise UnknownGameError(message=f"Unknown game: {game_id}", provider_name=game_id)
        return profile

    async def read_cached(self, game_id: str) -> WipeData | None:
        return await self._cache.read(self.get_profile(game_id).cache_key)

    async def get_wipe(self, game_id: str, force_refresh: bool = False) -> WipeResponse:
        """Return the game's record, refreshing it when the cache is stale.

        Raises
        ------
        UnknownGameError
            If *game_id* is not tracked.
        WipeDataUnavailableError
            If scraping failed and no cached record exists.
        """
        profile = self.get_profile(game_id)
        key = profile.cache_key

        if not force_refresh:
            cached = await self._cache.read(key)
            if cached is not None:
                now = self._clock()
                verdict = validate_cached_data(
                    cached,
                    max_cache_age=get_smart_cache_duration(cached.event_type, cached.confirmed),
                    now=now,
                )
                if verdict.is_valid:
                    minutes = self._age_minutes(cached, now)
                    logger.info("cache_hit", game=game_id, cache_age_min=minutes)
                    return WipeResponse.from_wipe(cached, from_cache=True, cache_age=minutes)
                logger.info("cache_invalid", game=game_id, reason=verdict.reason)

        try:
            data = await self._scrapers[game_id].scrape()
        except Exception as exc:  # any scrape failure degrades to stale cache
            logger.error("scrape_failed", game=game_id, error=str(exc), error_type=type(exc).__name__)
            cached = await self._cache.read(key)
            if cached is not None:
                logger.warning("serving_stale_cache", game=game_id)
                return WipeResponse.from_wipe(cached, from_cache=True, stale=True, error=STALE_ERROR)
            raise WipeDataUnavailableError(
                message=f"Failed to fetch {profile.name} data",
                provider_name=game_id,
            ) from exc

        await self._cache.write(key, data)
        logger.info("wipe_refreshed", game=game_id, next_wipe=data.next_wipe, confirmed=data.confirmed)
        return WipeResponse.from_wipe(data, from_cache=False)

    @staticmethod
    def _age_minutes(data: WipeData, now: datetime) -> int:
        age = cache_age(data, now)
        if age is None:
            return 0
        return max(0, round(age.total_seconds() / 60))
