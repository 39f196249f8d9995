"""Unit tests for the cross-game events feed."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from nextwipe.config.games import DEFAULT_GAMES
from nextwipe.services.event_aggregator import EventAggregator, group_events_by_date, to_game_event
from nextwipe.utils.errors import WipeDataUnavailableError


def _service(records: dict) -> MagicMock:
    """Wipe service double: ``records`` maps game id to a record or an exception."""
    service = MagicMock()
    service.profiles = {game_id: DEFAULT_GAMES[game_id] for game_id in records}

    async def _get_wipe(game_id: str, force_refresh: bool = False):
        value = records[game_id]
        if isinstance(value, Exception):
            raise value
        return value

    service.get_wipe = AsyncMock(side_effect=_get_wipe)
    return service


class TestToGameEvent:
    def test_builds_calendar_entry(self, make_wipe) -> None:
        event = to_game_event(DEFAULT_GAMES["rust"], make_wipe())
        assert event.id == "rust-next-wipe"
        assert event.game_name == "Rust"
        assert event.start_date == datetime(2025, 7, 3, 19, tzinfo=timezone.utc)
        assert event.description == "Monthly (First Thursday at 7PM UTC)"
        assert event.confirmed is True

    def test_announcement_is_preferred_description(self, make_wipe) -> None:
        event = to_game_event(DEFAULT_GAMES["poe"], make_wipe(announcement="Mercenaries League"))
        assert event.description == "Mercenaries League"
        assert event.title == DEFAULT_GAMES["poe"].event_title

    def test_no_date(self, make_wipe) -> None:
        assert to_game_event(DEFAULT_GAMES["rust"], make_wipe(next_wipe=None)) is None


class TestEventAggregator:
    @pytest.fixture
    def records(self, make_wipe) -> dict:
        return {
            "rust": make_wipe(),
            "tarkov": make_wipe(next_wipe="2025-06-20T12:00:00.000Z", confirmed=False),
            "poe": make_wipe(next_wipe="2025-06-01T00:00:00.000Z"),
            "valorant": make_wipe(next_wipe="2025-08-20T21:00:00.000Z"),
            "fortnite": WipeDataUnavailableError("Failed to fetch Fortnite data"),
        }

    @pytest.mark.asyncio
    async def test_upcoming_sorted_and_filtered(self, records, clock) -> None:
        aggregator = EventAggregator(_service(records), clock=clock)

        events = await aggregator.get_upcoming_events()

        assert [e.game_id for e in events] == ["tarkov", "rust", "valorant"]

    @pytest.mark.asyncio
    async def test_next_days(self, records, clock) -> None:
        aggregator = EventAggregator(_service(records), clock=clock)
        events = await aggregator.get_events_for_next_days(30)
        assert [e.game_id for e in events] == ["tarkov", "rust"]

    @pytest.mark.asyncio
    async def test_month(self, records, clock) -> None:
        aggregator = EventAggregator(_service(records), clock=clock)
        events = await aggregator.get_events_for_month(2025, 8)
        assert [e.id for e in events] == ["valorant-next-wipe"]

    @pytest.mark.asyncio
    async def test_uses_cache_first_lookups(self, records, clock) -> None:
        service = _service(records)
        await EventAggregator(service, clock=clock).get_upcoming_events()
        assert service.get_wipe.await_count == 5
        assert all(call.kwargs == {} for call in service.get_wipe.await_args_list)


def test_group_events_by_date(make_wipe) -> None:
    rust = to_game_event(DEFAULT_GAMES["rust"], make_wipe())
    lol = to_game_event(DEFAULT_GAMES["lol"], make_wipe(next_wipe="2025-07-03T23:30:00.000Z"))
    tarkov = to_game_event(DEFAULT_GAMES["tarkov"], make_wipe(next_wipe="2025-07-04T01:00:00.000Z"))

    grouped = group_events_by_date([rust, lol, tarkov])

    assert list(grouped) == ["2025-07-03", "2025-07-04"]
    assert [e.game_id for e in grouped["2025-07-03"]] == ["rust", "lol"]
