"""``Cache-Control`` header presets for API responses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheConfig:
    """Browser/CDN caching parameters, in seconds."""

    max_age: int = 300
    s_max_age: int = 300
    stale_while_revalidate: int = 600
    is_public: bool = True


class CachePresets:
    """Named configurations used by the routes."""

    # Estimates: 5 min fresh, 10 min stale.
    WIPE_DATA = CacheConfig(max_age=300, s_max_age=300, stale_while_revalidate=600)
    # Official dates change rarely: 15 min fresh, 1 h stale.
    CONFIRMED_DATA = CacheConfig(max_age=900, s_max_age=900, stale_while_revalidate=3600)
    DYNAMIC_DATA = CacheConfig(max_age=60, s_max_age=60, stale_while_revalidate=300)
    NO_CACHE = CacheConfig(max_age=0, s_max_age=0, stale_while_revalidate=0, is_public=False)


def get_cache_control_header(config: CacheConfig | None = None) -> str:
    config = config or CacheConfig()
    return ", ".join(
        [
            "public" if config.is_public else "private",
            f"max-age={config.max_age}",
            f"s-maxage={config.s_max_age}",
            f"stale-while-revalidate={config.stale_while_revalidate}",
        ]
    )


def preset_for(confirmed: bool) -> CacheConfig:
    return CachePresets.CONFIRMED_DATA if confirmed else CachePresets.WIPE_DATA
