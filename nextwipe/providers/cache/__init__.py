"""Cache store backends."""

from nextwipe.providers.cache.json_file_cache import JsonFileCacheProvider
from nextwipe.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["JsonFileCacheProvider", "MemoryCacheProvider"]
