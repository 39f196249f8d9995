"""FastAPI routes for nextwipe.

Endpoint                         Method  Description
-------------------------------  ------  ---------------------------------------
/api/wipes/{game_id}             GET     One game's record (``?refresh=true`` forces a scrape)
/api/cron/update-wipes           GET     Force-refresh every game (Bearer CRON_SECRET)
/api/games                       GET     Tracked games
/api/events                      GET     Upcoming resets within ``days``
/api/events/calendar             GET     Upcoming resets of one month
/api/health                      GET     Liveness probe

Services are resolved from ``app.state`` (populated by ``main._build_all``)
through ``Depends`` helpers.
"""

from __future__ import annotations

import secrets
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from nextwipe import __version__
from nextwipe.api.schemas import (
    CalendarResponse,
    CronErrorResponse,
    CronResponse,
    CronResult,
    ErrorResponse,
    EventsResponse,
    GameInfo,
    GamesResponse,
    HealthResponse,
)
from nextwipe.config.settings import Settings
from nextwipe.services.cache_headers import CachePresets, get_cache_control_header, preset_for
from nextwipe.services.cron_service import CronService
from nextwipe.services.event_aggregator import EventAggregator, group_events_by_date
from nextwipe.services.wipe_service import WipeService
from nextwipe.utils.dates import to_iso, utc_now
from nextwipe.utils.errors import UnknownGameError, WipeDataUnavailableError
from nextwipe.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_NO_CACHE = {"Cache-Control": get_cache_control_header(CachePresets.NO_CACHE)}


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------


def _get_wipe_service(request: Request) -> WipeService:
    return request.app.state.wipe_service


def _get_cron_service(request: Request) -> CronService:
    return request.app.state.cron_service


def _get_event_aggregator(request: Request) -> EventAggregator:
    return request.app.state.event_aggregator


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


WipeServiceDep = Annotated[WipeService, Depends(_get_wipe_service)]
CronServiceDep = Annotated[CronService, Depends(_get_cron_service)]
EventAggregatorDep = Annotated[EventAggregator, Depends(_get_event_aggregator)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


# ---------------------------------------------------------------------------
# Wipes
# ---------------------------------------------------------------------------


@router.get(
    "/wipes/{game_id}",
    summary="Get a game's next wipe",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_wipe(
    game_id: str,
    wipe_service: WipeServiceDep,
    refresh: str | None = Query(default=None, description="'true' bypasses the cache and scrapes now."),
) -> JSONResponse:
    """Return the cached record when valid, otherwise a fresh scrape.

    Only the literal ``refresh=true`` forces a scrape; any other value is a
    normal cached read.
    """
    try:
        data = await wipe_service.get_wipe(game_id, force_refresh=refresh == "true")
    except UnknownGameError as exc:
        return JSONResponse(status_code=404, content={"error": exc.message}, headers=_NO_CACHE)
    except WipeDataUnavailableError as exc:
        return JSONResponse(status_code=500, content={"error": exc.message}, headers=_NO_CACHE)

    return JSONResponse(
        content=data.to_payload(),
        headers={"Cache-Control": get_cache_control_header(preset_for(data.confirmed))},
    )


# ---------------------------------------------------------------------------
# Cron
# ---------------------------------------------------------------------------


@router.get(
    "/cron/update-wipes",
    response_model=CronResponse,
    summary="Force-refresh every game",
    responses={401: {"model": ErrorResponse}, 500: {"model": CronErrorResponse}},
)
async def update_wipes(
    request: Request,
    cron_service: CronServiceDep,
    settings: SettingsDep,
) -> CronResponse | JSONResponse:
    expected = f"Bearer {settings.cron_secret}"
    provided = request.headers.get("authorization", "")
    if not secrets.compare_digest(provided.encode(), expected.encode()):
        _logger.warning("cron_unauthorized", path=str(request.url.path))
        return JSONResponse(status_code=401, content={"error": "Unauthorized"}, headers=_NO_CACHE)

    try:
        results = await cron_service.run()
    except Exception as exc:  # report any fan-out failure to the scheduler
        _logger.error("cron_failed", error=str(exc))
        body = CronErrorResponse(error="Failed to update wipe data", details=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump(), headers=_NO_CACHE)

    return CronResponse(
        success=True,
        message="Wipe data update triggered",
        timestamp=to_iso(utc_now()),
        results=[CronResult(**result) for result in results],
    )


# ---------------------------------------------------------------------------
# Games and events
# ---------------------------------------------------------------------------


@router.get("/games", response_model=GamesResponse, summary="List tracked games")
async def list_games(wipe_service: WipeServiceDep) -> GamesResponse:
    return GamesResponse(
        games=[
            GameInfo(id=p.id, name=p.name, accent_color=p.accent_color, frequency=p.frequency)
            for p in wipe_service.profiles.values()
        ]
    )


@router.get("/events", response_model=EventsResponse, summary="Upcoming resets")
async def upcoming_events(
    aggregator: EventAggregatorDep,
    days: int = Query(default=30, ge=1, le=365),
) -> EventsResponse:
    events = await aggregator.get_events_for_next_days(days)
    return EventsResponse(events=events, count=len(events))


@router.get("/events/calendar", response_model=CalendarResponse, summary="Resets in one month")
async def calendar_events(
    aggregator: EventAggregatorDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
) -> CalendarResponse:
    today = utc_now()
    year = year or today.year
    month = month or today.month
    events = await aggregator.get_events_for_month(year, month)
    return CalendarResponse(year=year, month=month, events=events, by_date=group_events_by_date(events))


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)
