"""nextwipe FastAPI application entry point.

Wires together the source providers, the shared browser, the cache store
and the scraping services via dependency injection.  Loads configuration
from ``.env`` and ``config/config.yaml`` and configures structured logging.

Run locally with ``python -m nextwipe.main`` or ``uvicorn nextwipe.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from nextwipe import __version__
from nextwipe.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from nextwipe.api.routes import router as api_router
from nextwipe.config.loader import load_config, load_game_profiles
from nextwipe.config.settings import Settings
from nextwipe.interfaces.cache_provider import IWipeCacheProvider
from nextwipe.providers.browser.browser_manager import BrowserManager
from nextwipe.providers.browser.browser_page_provider import BrowserPageProvider
from nextwipe.providers.cache.json_file_cache import JsonFileCacheProvider
from nextwipe.providers.cache.memory_cache import MemoryCacheProvider
from nextwipe.providers.source.forum_provider import DiscourseForumProvider
from nextwipe.providers.source.http_page_provider import HttpPageProvider
from nextwipe.providers.source.reddit_provider import RedditProvider
from nextwipe.providers.source.steam_news_provider import SteamNewsProvider
from nextwipe.services.cron_service import CronService
from nextwipe.services.event_aggregator import EventAggregator
from nextwipe.services.scraping.registry import SourceProviders, build_scrapers
from nextwipe.services.wipe_service import WipeService
from nextwipe.utils.concurrency import RateGate
from nextwipe.utils.errors import ConfigurationError
from nextwipe.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component assembly
# ---------------------------------------------------------------------------


def _build_cache(backend: str, cache_dir: str) -> IWipeCacheProvider:
    if backend == "file":
        return JsonFileCacheProvider(cache_dir=cache_dir)
    if backend == "memory":
        return MemoryCacheProvider()
    raise ConfigurationError(f"Unknown cache backend '{backend}' (expected 'file' or 'memory')")


def _build_all(app_settings: Settings, config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    config = config if config is not None else load_config(settings=app_settings)
    cache_config = config.get("cache", {})
    cron_config = config.get("cron", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout, follow_redirects=True)
    browser_manager = BrowserManager(
        dev_mode=app_settings.is_browser_dev_mode,
        executable_path=app_settings.chromium_executable_path,
    )

    # -- Source providers --
    providers = SourceProviders(
        reddit=RedditProvider(
            http_client=http_client,
            rate_gate=RateGate(app_settings.reddit_min_interval, name="reddit"),
            timeout=app_settings.http_timeout,
        ),
        steam=SteamNewsProvider(http_client=http_client, timeout=app_settings.http_timeout),
        forum=DiscourseForumProvider(
            http_client=http_client,
            user_agent=app_settings.http_user_agent,
            timeout=app_settings.http_timeout,
        ),
        pages=HttpPageProvider(
            http_client=http_client,
            user_agent=app_settings.http_user_agent,
            timeout=app_settings.http_timeout,
        ),
        browser_pages=BrowserPageProvider(
            manager=browser_manager,
            timeout_ms=app_settings.browser_timeout_ms,
        ),
    )

    # -- Cache --
    cache = _build_cache(
        cache_config.get("backend", app_settings.cache_backend),
        cache_config.get("dir", app_settings.cache_dir),
    )

    # -- Services --
    profiles = load_game_profiles(config)
    scrapers = build_scrapers(profiles, providers)
    wipe_service = WipeService(profiles=profiles, scrapers=scrapers, cache=cache)
    cron_service = CronService(
        http_client=http_client,
        base_url=cron_config.get("base_url", app_settings.next_public_base_url),
        concurrency=cron_config.get("concurrency", app_settings.cron_concurrency),
    )
    event_aggregator = EventAggregator(wipe_service=wipe_service)

    return {
        "settings": app_settings,
        "http_client": http_client,
        "browser_manager": browser_manager,
        "cache": cache,
        "scrapers": scrapers,
        "wipe_service": wipe_service,
        "cron_service": cron_service,
        "event_aggregator": event_aggregator,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(app_settings: Settings, components: dict[str, Any] | None):
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise providers and services on startup, clean up on shutdown."""
        built = components if components is not None else _build_all(app_settings)

        for key, value in built.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=__version__,
            environment=app_settings.app_env,
            games=len(built["wipe_service"].profiles),
            cache=built["cache"].get_provider_name() if "cache" in built else None,
        )

        yield

        # -- Shutdown: close the browser and the shared httpx client --
        browser_manager: BrowserManager | None = built.get("browser_manager")
        if browser_manager is not None:
            await browser_manager.close()
        http_client: httpx.AsyncClient | None = built.get("http_client")
        if http_client is not None:
            await http_client.aclose()
        _logger.info("app_shutdown", message="Browser and HTTP client closed")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    components: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    app_settings:
        Settings to build from; defaults to the module-level instance.
    components:
        Pre-built ``app.state`` components.  When given, ``_build_all`` is
        skipped (tests pass fakes here).
    """
    app_settings = app_settings or settings
    application = FastAPI(
        title="nextwipe API",
        version=__version__,
        description=(
            "Next wipe, league and season start times for live-service games, "
            "scraped from official channels and cached."
        ),
        lifespan=_make_lifespan(app_settings, components),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "nextwipe.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
