"""Integration tests for the HTTP API using TestClient.

The app is built from real services (wipe service, scrapers, memory cache,
event aggregator) over fake sources and a fixed clock; only the cron
fan-out is mocked since it calls back into the API over HTTP.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from nextwipe import __version__
from nextwipe.config.games import DEFAULT_GAMES
from nextwipe.config.settings import Settings
from nextwipe.main import create_app
from nextwipe.providers.cache.memory_cache import MemoryCacheProvider
from nextwipe.services.event_aggregator import EventAggregator
from nextwipe.services.scraping.registry import build_scrapers
from nextwipe.services.wipe_service import WipeService
from nextwipe.utils.dates import to_iso
from nextwipe.utils.errors import CacheError

CRON_SECRET = "s3cret"
CONFIRMED_CACHE = "public, max-age=900, s-maxage=900, stale-while-revalidate=3600"
ESTIMATE_CACHE = "public, max-age=300, s-maxage=300, stale-while-revalidate=600"
NO_CACHE = "private, max-age=0, s-maxage=0, stale-while-revalidate=0"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache() -> MemoryCacheProvider:
    return MemoryCacheProvider()


@pytest.fixture
def cron_service() -> MagicMock:
    service = MagicMock()
    service.run = AsyncMock(
        return_value=[
            {
                "game": "rust",
                "status": "fulfilled",
                "success": True,
                "data": {"nextWipe": "2025-07-03T19:00:00.000Z"},
            },
            {"game": "poe", "status": "rejected", "success": False, "error": "timed out"},
        ]
    )
    return service


@pytest.fixture
def components(source_providers, cache, cron_service, clock) -> dict:
    settings = Settings(cron_secret=CRON_SECRET, cache_backend="memory", cors_origins="*")
    scrapers = build_scrapers(DEFAULT_GAMES, source_providers, clock=clock)
    wipe_service = WipeService(profiles=DEFAULT_GAMES, scrapers=scrapers, cache=cache, clock=clock)
    return {
        "settings": settings,
        "cache": cache,
        "scrapers": scrapers,
        "wipe_service": wipe_service,
        "cron_service": cron_service,
        "event_aggregator": EventAggregator(wipe_service=wipe_service, clock=clock),
    }


@pytest.fixture
def client(components):
    app = create_app(components["settings"], components=components)
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# /api/wipes/{game_id}
# ---------------------------------------------------------------------------


class TestWipes:
    def test_fresh_then_cached(self, client) -> None:
        first = client.get("/api/wipes/rust")
        second = client.get("/api/wipes/rust")

        assert first.status_code == 200
        body = first.json()
        assert body["nextWipe"] == "2025-07-03T19:00:00.000Z"
        assert body["lastWipe"] == "2025-06-05T19:00:00.000Z"
        assert body["confirmed"] is True
        assert body["fromCache"] is False
        assert first.headers["cache-control"] == CONFIRMED_CACHE

        assert second.json()["fromCache"] is True
        assert second.json()["cacheAge"] == 0

    def test_refresh_bypasses_cache(self, client) -> None:
        client.get("/api/wipes/rust")
        response = client.get("/api/wipes/rust", params={"refresh": "true"})
        assert response.json()["fromCache"] is False

    @pytest.mark.parametrize("value", ["maybe", "1", "TRUE", ""])
    def test_non_true_refresh_is_a_cached_read(self, client, value) -> None:
        client.get("/api/wipes/rust")
        response = client.get("/api/wipes/rust", params={"refresh": value})

        assert response.status_code == 200
        assert response.json()["fromCache"] is True
        assert response.headers["cache-control"] == CONFIRMED_CACHE

    def test_estimate_gets_short_cache_header(self, client) -> None:
        response = client.get("/api/wipes/cod")
        assert response.json()["confirmed"] is False
        assert response.headers["cache-control"] == ESTIMATE_CACHE

    def test_unknown_game(self, client) -> None:
        response = client.get("/api/wipes/minecraft")
        assert response.status_code == 404
        assert response.json() == {"error": "Unknown game: minecraft"}
        assert response.headers["cache-control"] == NO_CACHE

    def test_failed_scrape_without_cache(self, client) -> None:
        response = client.get("/api/wipes/poe")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch Path of Exile data"}
        assert response.headers["cache-control"] == NO_CACHE

    def test_failed_scrape_serves_stale(self, client, cache, make_wipe, fixed_now) -> None:
        seed = cache.write(
            "fortnite-season",
            make_wipe(
                next_wipe="2025-08-01T00:00:00.000Z",
                source="fortnite.gg (data-target)",
                scraped_at=to_iso(fixed_now - timedelta(days=1)),
            ),
        )
        asyncio.run(seed)

        response = client.get("/api/wipes/fortnite")

        assert response.status_code == 200
        body = response.json()
        assert body["stale"] is True
        assert body["error"] == "Failed to fetch fresh data"
        assert body["fromCache"] is True
        assert body["nextWipe"] == "2025-08-01T00:00:00.000Z"


# ---------------------------------------------------------------------------
# /api/cron/update-wipes
# ---------------------------------------------------------------------------


class TestCron:
    def test_missing_token(self, client, cron_service) -> None:
        response = client.get("/api/cron/update-wipes")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        cron_service.run.assert_not_awaited()

    def test_wrong_token(self, client, cron_service) -> None:
        response = client.get("/api/cron/update-wipes", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        cron_service.run.assert_not_awaited()

    def test_reports_each_game(self, client) -> None:
        response = client.get("/api/cron/update-wipes", headers={"Authorization": f"Bearer {CRON_SECRET}"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Wipe data update triggered"
        assert body["timestamp"].endswith("Z")
        assert [(r["game"], r["status"], r["success"]) for r in body["results"]] == [
            ("rust", "fulfilled", True),
            ("poe", "rejected", False),
        ]
        assert body["results"][1]["error"] == "timed out"

    def test_run_failure(self, client, cron_service) -> None:
        cron_service.run.side_effect = RuntimeError("event loop closed")

        response = client.get("/api/cron/update-wipes", headers={"Authorization": f"Bearer {CRON_SECRET}"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to update wipe data", "details": "event loop closed"}


# ---------------------------------------------------------------------------
# Games, events, health
# ---------------------------------------------------------------------------


class TestCatalogue:
    def test_games(self, client) -> None:
        games = client.get("/api/games").json()["games"]
        assert len(games) == len(DEFAULT_GAMES)
        rust = next(g for g in games if g["id"] == "rust")
        assert rust == {
            "id": "rust",
            "name": "Rust",
            "accentColor": "rgb(206, 106, 76)",
            "frequency": "Monthly (First Thursday at 7PM UTC)",
        }

    def test_events_next_days(self, client) -> None:
        body = client.get("/api/events", params={"days": 30}).json()

        starts = [e["startDate"] for e in body["events"]]
        assert body["count"] == len(body["events"])
        assert starts == sorted(starts)
        assert "rust-next-wipe" in [e["id"] for e in body["events"]]
        assert all("2025-06-10" < s[:10] <= "2025-07-10" for s in starts)

    def test_events_days_is_bounded(self, client) -> None:
        assert client.get("/api/events", params={"days": 0}).status_code == 422

    def test_calendar(self, client) -> None:
        body = client.get("/api/events/calendar", params={"year": 2025, "month": 7}).json()

        assert (body["year"], body["month"]) == (2025, 7)
        assert "rust-next-wipe" in [e["id"] for e in body["byDate"]["2025-07-03"]]
        assert all(day.startswith("2025-07-") for day in body["byDate"])

    def test_health(self, client) -> None:
        assert client.get("/api/health").json() == {"status": "ok", "version": __version__}

    def test_cors(self, client) -> None:
        response = client.get("/api/health", headers={"Origin": "https://nextwipetime.com"})
        assert response.headers["access-control-allow-origin"] == "*"


def test_application_errors_become_json(components) -> None:
    aggregator = MagicMock()
    aggregator.get_events_for_next_days = AsyncMock(side_effect=CacheError("disk full", provider_name="json_file"))
    components["event_aggregator"] = aggregator
    app = create_app(components["settings"], components=components)

    with TestClient(app) as client:
        response = client.get("/api/events")

    assert response.status_code == 500
    assert response.json() == {"error": "CacheError", "detail": "disk full"}
    assert response.headers["cache-control"] == NO_CACHE
