"""JSON-file cache provider: one pretty-printed file per game.

Files live at ``<cache_dir>/<game>-<label>.json``.  Writes go to a temp
file in the same directory and are renamed over the target, so readers
see either the old record or the new one.  Two concurrent writers for the
same game still race; the last rename wins.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import ValidationError

from nextwipe.interfaces.cache_provider import IWipeCacheProvider
from nextwipe.models.wipe import WipeData
from nextwipe.utils.errors import CacheError

logger = structlog.get_logger(logger_name=__name__)


class JsonFileCacheProvider(IWipeCacheProvider):
    """File-backed ``WipeData`` store.

    Parameters
    ----------
    cache_dir:
        Directory holding the cache files; created on first use.
    """

    def __init__(self, cache_dir: str | Path = "cache") -> None:
        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, key: str) -> Path:
        return self._cache_dir / f"{key}.json"

    # ------------------------------------------------------------------
    # IWipeCacheProvider implementation
    # ------------------------------------------------------------------

    async def read(self, key: str) -> WipeData | None:
        try:
            return await asyncio.to_thread(self._read_sync, key)
        except CacheError as exc:
            logger.error("cache_read_failed", key=key, error=str(exc))
            return None

    async def write(self, key: str, data: WipeData) -> None:
        try:
            await asyncio.to_thread(self._write_sync, key, data)
        except CacheError as exc:
            logger.error("cache_write_failed", key=key, error=str(exc))
            return
        logger.debug("cache_written", key=key, path=str(self.path_for(key)))

    def get_provider_name(self) -> str:
        return "json_file"

    # -- Sync helpers (executed via asyncio.to_thread) -------------------

    def _read_sync(self, key: str) -> WipeData | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return WipeData.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, ValueError) as exc:
            raise CacheError(f"Unreadable cache file {path}: {exc}", provider_name="json_file") from exc

    def _write_sync(self, key: str, data: WipeData) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(data.to_payload(), indent=2, default=str)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self._cache_dir, prefix=f".{key}.", suffix=".tmp", delete=False
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise CacheError(f"Could not write {path}: {exc}", provider_name="json_file") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
