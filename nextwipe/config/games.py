"""Per-game scheduling table.

Every publisher releases at a known hour, on a known cadence, and announces
within a known lead time.  Scrapers read those facts from this table
instead of hard-coding them:

- ``release_hour_utc`` -- hour of day stamped on extracted dates.
- ``cycle_days`` / ``cycle_months`` -- length of one season/league/act;
  ``last_wipe`` is derived by stepping one cycle back from ``next_wipe``.
- ``min_days`` / ``max_days`` -- plausibility window for a scraped date
  (``None`` means open on that side).

``config/config.yaml`` can override any field under ``games.<id>`` (see
:func:`nextwipe.config.loader.load_game_profiles`).
"""

from __future__ import annotations

from datetime import datetime

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field


class GameProfile(BaseModel):
    """Static facts about one tracked game."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="URL id, e.g. ``poe2``.")
    name: str = Field(description="Display name.")
    accent_color: str = Field(description="CSS colour used by the front end.")
    cache_label: str = Field(description="Suffix of the cache file name.")
    release_hour_utc: int = Field(default=0, ge=0, le=23)
    cycle_days: int = Field(default=0, ge=0)
    cycle_months: int = Field(default=0, ge=0)
    min_days: float | None = None
    max_days: float | None = None
    frequency: str = Field(description="Human-readable cadence.")
    event_title: str = Field(default="Wipe", description="Calendar entry title.")
    event_kind: str = Field(default="wipe", description="Calendar entry type.")

    @property
    def cache_key(self) -> str:
        return f"{self.id}-{self.cache_label}"

    def cycle(self) -> relativedelta:
        return relativedelta(months=self.cycle_months, days=self.cycle_days)

    def previous(self, next_wipe: datetime) -> datetime:
        """Start of the cycle that ends at *next_wipe*."""
        return next_wipe - self.cycle()

    def advance_past(self, anchor: datetime, now: datetime) -> datetime:
        """Step *anchor* forward one cycle at a time until it is after *now*."""
        step = self.cycle()
        if anchor + step <= anchor:
            raise ValueError(f"Game {self.id} has no cycle length")
        current = anchor
        while current <= now:
            current = current + step
        return current


DEFAULT_GAMES: dict[str, GameProfile] = {
    p.id: p
    for p in [
        GameProfile(
            id="rust", name="Rust", accent_color="rgb(206, 106, 76)", cache_label="wipe",
            release_hour_utc=19, cycle_months=1,
            frequency="Monthly (First Thursday at 7PM UTC)",
        ),
        GameProfile(
            id="tarkov", name="Escape from Tarkov", accent_color="rgb(155, 179, 96)",
            cache_label="wipe", release_hour_utc=12, cycle_months=6,
            frequency="Every 6 months (approx)",
        ),
        GameProfile(
            id="poe", name="Path of Exile", accent_color="rgb(175, 96, 37)", cache_label="league",
            cycle_months=3, frequency="Every 3 months (13 weeks)", event_title="New League",
        ),
        GameProfile(
            id="fortnite", name="Fortnite", accent_color="rgb(0, 188, 242)", cache_label="season",
            cycle_days=70, frequency="Seasonal (60-90 days)", event_title="New Season",
        ),
        GameProfile(
            id="diablo4", name="Diablo 4", accent_color="rgb(139, 0, 0)", cache_label="season",
            release_hour_utc=18, cycle_months=3, min_days=7, max_days=180,
            frequency="Every 3 months (Seasonal)", event_title="New Season", event_kind="season",
        ),
        GameProfile(
            id="lastepoch", name="Last Epoch", accent_color="rgb(138, 43, 226)",
            cache_label="cycle", release_hour_utc=17, cycle_months=4, min_days=7, max_days=180,
            frequency="Every 3-4 months (Cycles)", event_title="New Cycle",
        ),
        GameProfile(
            id="valorant", name="Valorant", accent_color="rgb(255, 70, 85)", cache_label="act",
            release_hour_utc=21, cycle_days=60, min_days=3, max_days=90,
            frequency="Every ~2 months (6 acts per year)",
        ),
        GameProfile(
            id="lol", name="League of Legends", accent_color="rgb(200, 155, 60)",
            cache_label="season", release_hour_utc=19, cycle_months=4, min_days=7, max_days=150,
            frequency="Every ~4 months (3 splits per year)",
        ),
        GameProfile(
            id="tft", name="Teamfight Tactics", accent_color="rgb(72, 112, 255)", cache_label="set",
            release_hour_utc=18, cycle_months=4, min_days=7, max_days=150,
            frequency="Every ~4 months",
        ),
        GameProfile(
            id="apex", name="Apex Legends", accent_color="rgb(220, 53, 69)", cache_label="season",
            release_hour_utc=17, cycle_days=90, min_days=3, max_days=120,
            frequency="Every ~3 months (90 days)",
        ),
        GameProfile(
            id="cod", name="Call of Duty", accent_color="rgb(0, 255, 0)", cache_label="season",
            release_hour_utc=16, cycle_days=65, min_days=3, max_days=90,
            frequency="Every ~2 months (60-70 days)",
        ),
        GameProfile(
            id="rocketleague", name="Rocket League", accent_color="rgb(0, 121, 255)",
            cache_label="season", release_hour_utc=17, cycle_months=3, min_days=3, max_days=150,
            frequency="Every ~3-4 months",
        ),
        GameProfile(
            id="dbd", name="Dead by Daylight", accent_color="rgb(139, 0, 0)", cache_label="chapter",
            release_hour_utc=16, cycle_months=3, min_days=3, max_days=120,
            frequency="Every 3 months",
        ),
        GameProfile(
            id="pubg", name="PUBG", accent_color="rgb(244, 125, 0)", cache_label="season",
            release_hour_utc=14, cycle_months=2, min_days=3, max_days=120,
            frequency="Every ~2-3 months",
        ),
        GameProfile(
            id="overwatch2", name="Overwatch 2", accent_color="rgb(249, 147, 25)",
            cache_label="season", release_hour_utc=18, cycle_days=63, min_days=3, max_days=70,
            frequency="Every ~9 weeks",
        ),
        GameProfile(
            id="destiny2", name="Destiny 2", accent_color="rgb(255, 255, 255)",
            cache_label="season", release_hour_utc=17, cycle_months=3, min_days=3, max_days=120,
            frequency="Every ~3 months",
        ),
        GameProfile(
            id="r6siege", name="Rainbow Six Siege", accent_color="rgb(211, 176, 99)",
            cache_label="season", release_hour_utc=13, cycle_months=3, min_days=3, max_days=120,
            frequency="Every ~3 months (4 seasons per year)",
        ),
        GameProfile(
            id="poe2", name="Path of Exile 2", accent_color="rgb(170, 117, 76)",
            cache_label="league", cycle_days=90, frequency="Leagues every ~13 weeks",
        ),
        GameProfile(
            id="warframe", name="Warframe", accent_color="rgb(0, 147, 208)", cache_label="update",
            release_hour_utc=15, cycle_days=90, min_days=3, max_days=180,
            frequency="Major updates 2-4 times per year",
        ),
    ]
}

# Order the cron job refreshes games in.
CRON_GAMES: tuple[str, ...] = (
    "rust", "tarkov", "poe", "fortnite", "diablo4", "lastepoch", "valorant", "lol", "tft",
    "apex", "cod", "rocketleague", "dbd", "pubg", "overwatch2", "destiny2", "r6siege",
    "poe2", "warframe",
)
