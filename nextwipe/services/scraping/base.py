"""Strategy contract shared by every per-game scraper.

A game's scraper is an ordered list of :class:`ScrapeStrategy` objects.
Each strategy gets a :class:`ScrapeContext` (the game profile plus a
frozen "now") and returns a :class:`WipeData` or ``None`` to let the next
strategy try.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from nextwipe.config.games import GameProfile
from nextwipe.models.wipe import WipeData
from nextwipe.utils.dates import in_window, to_iso


@dataclass(frozen=True)
class ScrapeContext:
    """Inputs shared by all strategies during one scrape."""

    profile: GameProfile
    now: datetime

    def in_window(
        self,
        target: datetime,
        min_days: float | None = None,
        max_days: float | None = None,
    ) -> bool:
        """Window check using the profile bounds unless overridden."""
        low = self.profile.min_days if min_days is None else min_days
        high = self.profile.max_days if max_days is None else max_days
        return in_window(target, low, high, self.now)

    def record(
        self,
        next_wipe: datetime | None,
        *,
        source: str,
        confirmed: bool,
        last_wipe: datetime | None = None,
        frequency: str | None = None,
        **extra: Any,
    ) -> WipeData:
        """Build a record stamped with this scrape's time.

        ``last_wipe`` defaults to one game cycle before ``next_wipe``.
        """
        if last_wipe is None and next_wipe is not None:
            last_wipe = self.profile.previous(next_wipe)
        return WipeData(
            next_wipe=to_iso(next_wipe) if next_wipe else None,
            last_wipe=to_iso(last_wipe) if last_wipe else None,
            frequency=frequency or self.profile.frequency,
            source=source,
            scraped_at=to_iso(self.now),
            confirmed=confirmed,
            **extra,
        )


class ScrapeStrategy(ABC):
    """One way of finding a game's next reset date."""

    #: Short identifier used in logs.
    name: str = "strategy"

    @abstractmethod
    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        """Return a record, or ``None`` when this source has no usable date."""
