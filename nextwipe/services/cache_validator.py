"""Decide whether a cached wipe record can still be served.

Cache age alone is not enough: a record whose ``nextWipe`` already passed
is stale no matter how recently it was scraped, and estimates should be
re-checked sooner than confirmed dates so an official announcement shows
up quickly.  Freshness is recomputed from "now" on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from nextwipe.models.wipe import WipeData
from nextwipe.utils.dates import parse_iso, utc_now

DEFAULT_MAX_CACHE_AGE = timedelta(hours=6)

_PATCH_TYPES = frozenset({"patch", "hotfix"})
_RECENT_EVENT_REFRESH = timedelta(hours=2)
_UNCONFIRMED_REFRESH = timedelta(hours=3)
_PATCH_REFRESH = timedelta(hours=2)
_EVENT_REFRESH = timedelta(hours=4)


@dataclass(frozen=True)
class CacheValidation:
    """Verdict on one cached record."""

    is_valid: bool
    should_refresh: bool
    reason: str | None = None


def _invalid(reason: str) -> CacheValidation:
    return CacheValidation(is_valid=False, should_refresh=True, reason=reason)


def get_smart_cache_duration(event_type: str | None, confirmed: bool | None) -> timedelta:
    """Maximum cache age for a record of this kind.

    Estimates: 3 h.  Patches/hotfixes: 2 h.  Special events: 4 h.
    Leagues, seasons and everything else: 6 h.
    """
    if confirmed is False:
        return timedelta(hours=3)
    if not event_type:
        return DEFAULT_MAX_CACHE_AGE
    kind = event_type.lower()
    if kind in _PATCH_TYPES:
        return timedelta(hours=2)
    if kind == "event":
        return timedelta(hours=4)
    return DEFAULT_MAX_CACHE_AGE


def cache_age(data: WipeData, now: datetime | None = None) -> timedelta | None:
    """Time since the record was scraped, or ``None`` if unknown."""
    scraped = parse_iso(data.scraped_at)
    if scraped is None:
        return None
    return (now or utc_now()) - scraped


def validate_cached_data(
    data: WipeData | None,
    max_cache_age: timedelta = DEFAULT_MAX_CACHE_AGE,
    now: datetime | None = None,
) -> CacheValidation:
    """Check a cached record against age, event date, confirmation and type.

    Parameters
    ----------
    data:
        Cached record, or ``None`` on a cache miss.
    max_cache_age:
        Hard age limit, normally :func:`get_smart_cache_duration`.
    now:
        Reference time; defaults to the current UTC time.

    Returns
    -------
    CacheValidation
        ``is_valid=False`` always comes with ``should_refresh=True`` and a
        human-readable reason.
    """
    if data is None:
        return _invalid("No cached data")

    now = now or utc_now()
    age = cache_age(data, now)

    if age is not None and age > max_cache_age:
        return _invalid(f"Cache too old: {round(age.total_seconds() / 60)} minutes")

    next_wipe = parse_iso(data.next_wipe)
    if next_wipe is not None:
        hours_until = (next_wipe - now).total_seconds() / 3600
        if hours_until < -24:
            return _invalid(f"Event date is {abs(round(hours_until))}h in the past")
        if -24 < hours_until < 0 and age is not None and age > _RECENT_EVENT_REFRESH:
            return _invalid("Event recently happened, checking for next event announcement")

    if data.confirmed is False and age is not None and age > _UNCONFIRMED_REFRESH:
        return _invalid("Unconfirmed date - checking for official announcement")

    kind = (data.event_type or "").lower()
    if kind in _PATCH_TYPES and age is not None and age > _PATCH_REFRESH:
        return _invalid("Patch data refreshes every 2 hours")
    if kind == "event" and age is not None and age > _EVENT_REFRESH:
        return _invalid("Special event data refreshes every 4 hours")

    return CacheValidation(is_valid=True, should_refresh=False)
