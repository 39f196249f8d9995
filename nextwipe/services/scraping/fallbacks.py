"""Deterministic schedule estimates.

Each function maps a :class:`ScrapeContext` to a :class:`WipeData` using
nothing but calendar arithmetic.  Rust's first-Thursday rule is exact and
therefore ``confirmed``; every other function is an estimate used after
all live sources failed and is never confirmed.

Anchors that are fixed historical dates (the last known season start)
are stepped forward one game cycle at a time until they land in the
future, so an estimate never points at the past.
"""

from __future__ import annotations

from datetime import datetime, timezone

from nextwipe.models.wipe import WipeData
from nextwipe.services.scraping.base import ScrapeContext
from nextwipe.utils.dates import add_days, add_months, at_hour, first_weekday_of_month

THURSDAY = 3

_CHECK_OFFICIAL = "Estimated - check official sources"
_TYPICAL_SEASON = "Estimated based on typical season length"


def _utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Calculated schedules
# ---------------------------------------------------------------------------


def rust_force_wipe(ctx: ScrapeContext) -> WipeData:
    """Rust force-wipes on the first Thursday of every month."""
    now, hour = ctx.now, ctx.profile.release_hour_utc
    upcoming = first_weekday_of_month(now.year, now.month, THURSDAY, hour)
    if upcoming <= now:
        following = add_months(_utc(now.year, now.month, 1), 1)
        upcoming = first_weekday_of_month(following.year, following.month, THURSDAY, hour)

    prior = add_months(_utc(upcoming.year, upcoming.month, 1), -1)
    last = first_weekday_of_month(prior.year, prior.month, THURSDAY, hour)
    return ctx.record(upcoming, last_wipe=last, source="rustforcewipe.com (calculated)", confirmed=True)


# ---------------------------------------------------------------------------
# Anchored estimates
# ---------------------------------------------------------------------------


def tarkov_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = ctx.profile.advance_past(_utc(2024, 7, 10, 12), ctx.now)
    return ctx.record(
        upcoming,
        source="r/EscapefromTarkov (Estimated)",
        confirmed=False,
        announcement="No official announcement found. This is an estimate.",
    )


def lastepoch_estimate(ctx: ScrapeContext) -> WipeData:
    # Cycle 1.2 launched 2024-08-21; the following cycle was expected mid-February 2025.
    upcoming = ctx.profile.advance_past(_utc(2025, 2, 15, 17), ctx.now)
    return ctx.record(
        upcoming,
        source="Estimated from the last announced cycle",
        confirmed=False,
        announcement=(
            "Last Epoch announces new cycles 1-2 weeks in advance. Check forum.lastepoch.com, "
            "r/LastEpoch or Steam for the official date."
        ),
    )


def diablo4_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = ctx.profile.advance_past(_utc(2025, 12, 9, 18), ctx.now)
    return ctx.record(
        upcoming,
        source="Based on announced Season 11 (Dec 9, 2025)",
        confirmed=False,
        announcement="Estimated from the Season 11 launch on a 3-month cadence",
        event_type="season",
    )


def apex_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = ctx.profile.advance_past(_utc(2025, 11, 4, 17), ctx.now)
    return ctx.record(
        upcoming,
        source="Based on Season 27 (Nov 4, 2025)",
        confirmed=False,
        announcement=_CHECK_OFFICIAL,
    )


def valorant_estimate(ctx: ScrapeContext) -> WipeData:
    """Acts run 60 days from the Season 2025 start on 2025-01-08."""
    anchor = _utc(2025, 1, 8, 21)
    act = 1
    upcoming = anchor
    while upcoming <= ctx.now:
        upcoming = add_days(upcoming, ctx.profile.cycle_days)
        act += 1
    return ctx.record(
        upcoming,
        source="Based on Season 2025 schedule (Jan 8, 2025)",
        confirmed=False,
        announcement=f"Valorant Season 2025 Act {act} (estimated)",
    )


def tft_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = ctx.profile.advance_past(_utc(2025, 12, 3, 18), ctx.now)
    return ctx.record(
        upcoming,
        source="Estimated from the Set 16 release (Dec 3, 2025)",
        confirmed=False,
        announcement=_CHECK_OFFICIAL,
        event_type="season",
    )


# ---------------------------------------------------------------------------
# Calendar-pattern estimates
# ---------------------------------------------------------------------------


def _next_on_calendar(now: datetime, dates: list[tuple[int, int]], hour: int) -> datetime:
    """First ``(month, day)`` of this year after *now*, else the first of next year."""
    for month, day in dates:
        candidate = at_hour(now.year, month, day, hour)
        if candidate is not None and candidate > now:
            return candidate
    month, day = dates[0]
    return _utc(now.year + 1, month, day, hour)


def lol_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = _next_on_calendar(ctx.now, [(1, 10), (5, 15), (9, 20)], ctx.profile.release_hour_utc)
    return ctx.record(
        upcoming,
        last_wipe=add_months(upcoming, -4),
        source="Based on typical LoL split schedule",
        confirmed=False,
        announcement="Estimated based on typical split schedule",
    )


def dbd_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = _next_on_calendar(
        ctx.now, [(3, 15), (6, 15), (9, 15), (12, 15)], ctx.profile.release_hour_utc
    )
    return ctx.record(
        upcoming,
        source="Based on typical chapter schedule",
        confirmed=False,
        announcement="Estimated based on 3-month cycle",
    )


def rocketleague_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = add_months(ctx.now, 2)
    return ctx.record(
        upcoming,
        last_wipe=add_months(upcoming, -3),
        source=_TYPICAL_SEASON,
        confirmed=False,
        announcement=_CHECK_OFFICIAL,
    )


def cod_estimate(ctx: ScrapeContext) -> WipeData:
    upcoming = add_days(ctx.now, 35)
    return ctx.record(
        upcoming,
        last_wipe=add_days(upcoming, -65),
        source=_TYPICAL_SEASON,
        confirmed=False,
        announcement=_CHECK_OFFICIAL,
    )


def pubg_estimate(ctx: ScrapeContext) -> WipeData:
    following = add_months(_utc(ctx.now.year, ctx.now.month, 1), 1)
    upcoming = _utc(following.year, following.month, 15, ctx.profile.release_hour_utc)
    return ctx.record(
        upcoming,
        last_wipe=add_months(upcoming, -2),
        source=_TYPICAL_SEASON,
        confirmed=False,
        announcement=_CHECK_OFFICIAL,
    )


def offset_estimate(back_days: int, ahead_days: int, source: str, announcement: str):
    """Estimate ``now - back_days`` / ``now + ahead_days`` for news-page games."""

    def _estimate(ctx: ScrapeContext) -> WipeData:
        return ctx.record(
            add_days(ctx.now, ahead_days),
            last_wipe=add_days(ctx.now, -back_days),
            source=source,
            confirmed=False,
            announcement=announcement,
        )

    return _estimate
