"""In-memory cache provider using cachetools.LRUCache.

Suitable for tests and single-process deployments without a writable disk.
Records are kept as JSON payloads so reads return fresh model instances,
mirroring a round-trip through the file backend.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import LRUCache

from nextwipe.interfaces.cache_provider import IWipeCacheProvider
from nextwipe.models.wipe import WipeData

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(IWipeCacheProvider):
    """In-memory ``WipeData`` store backed by ``cachetools.LRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of records before the least-recently-used one is
        evicted.  The default comfortably holds every tracked game.
    """

    def __init__(self, max_size: int = 64) -> None:
        self._cache: LRUCache[str, dict[str, Any]] = LRUCache(maxsize=max_size)

    async def read(self, key: str) -> WipeData | None:
        payload = self._cache.get(key)
        if payload is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return WipeData.model_validate(payload)

    async def write(self, key: str, data: WipeData) -> None:
        self._cache[key] = data.to_payload()
        logger.debug("cache_set", key=key)

    def get_provider_name(self) -> str:
        return "memory"

    def clear(self) -> None:
        self._cache.clear()
