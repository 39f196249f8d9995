"""Cross-game calendar of upcoming resets.

Every game's record is loaded through :class:`WipeService` (cache-first),
and each future ``nextWipe`` becomes one :class:`GameEvent`.  A game whose
lookup fails is logged and left out of the feed.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog

from nextwipe.config.games import GameProfile
from nextwipe.models.event import GameEvent
from nextwipe.models.wipe import WipeData
from nextwipe.services.wipe_service import WipeService
from nextwipe.utils.concurrency import gather_settled
from nextwipe.utils.dates import parse_iso, utc_now

logger = structlog.get_logger(logger_name=__name__)


def to_game_event(profile: GameProfile, data: WipeData) -> GameEvent | None:
    """Calendar entry for a record, or ``None`` when it has no date."""
    start = parse_iso(data.next_wipe)
    if start is None:
        return None
    return GameEvent(
        id=f"{profile.id}-next-wipe",
        game_id=profile.id,
        game_name=profile.name,
        title=profile.event_title,
        type=profile.event_kind,
        start_date=start.astimezone(timezone.utc),
        confirmed=data.confirmed,
        description=data.announcement or data.frequency,
        accent_color=profile.accent_color,
    )


def group_events_by_date(events: list[GameEvent]) -> dict[str, list[GameEvent]]:
    """Bucket events by UTC day (``YYYY-MM-DD``), keeping input order."""
    grouped: dict[str, list[GameEvent]] = defaultdict(list)
    for event in events:
        grouped[event.start_date.strftime("%Y-%m-%d")].append(event)
    return dict(grouped)


class EventAggregator:
    """Build the upcoming-events feed from every game's wipe record."""

    def __init__(self, wipe_service: WipeService, clock: Callable[[], datetime] = utc_now) -> None:
        self._wipes = wipe_service
        self._clock = clock

    async def get_upcoming_events(self) -> list[GameEvent]:
        """Every game's next reset that is still ahead, earliest first."""
        profiles = list(self._wipes.profiles.values())
        outcomes = await gather_settled([self._wipes.get_wipe(p.id) for p in profiles])
        now = self._clock()

        events: list[GameEvent] = []
        for profile, outcome in zip(profiles, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("event_lookup_failed", game=profile.id, error=str(outcome))
                continue
            event = to_game_event(profile, outcome)
            if event is not None and event.start_date > now:
                events.append(event)

        events.sort(key=lambda e: e.start_date)
        return events

    async def get_events_for_next_days(self, days: int = 30) -> list[GameEvent]:
        now = self._clock()
        horizon = now + timedelta(days=days)
        return [e for e in await self.get_upcoming_events() if now <= e.start_date <= horizon]

    async def get_events_for_month(self, year: int, month: int) -> list[GameEvent]:
        """Upcoming events starting in the given UTC month (1-12)."""
        return [
            e for e in await self.get_upcoming_events()
            if e.start_date.year == year and e.start_date.month == month
        ]
