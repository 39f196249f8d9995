"""Date extraction from scraped text and calendar arithmetic helpers.

Publishers announce resets in prose ("Season 16 launches December 3,
2025"), so every scraper ends up running the same regex scan over HTML or
post text.  The functions here turn those mentions into UTC datetimes at
the game's known release hour.

Two rules hold for every scan:

- A mention with no explicit year is dated in the *current* year.  If that
  date has already passed it is treated as non-future and the scan moves
  on; it is never rolled forward to next year.
- The first future match in source order wins.  Callers that want the
  earliest date across a whole page (wiki listings) sort
  :func:`future_dates` themselves.

All functions accept ``now`` so tests can pin the clock.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# ---------------------------------------------------------------------------
# Month table and patterns
# ---------------------------------------------------------------------------

MONTHS: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

# Full names before abbreviations so "march" is not consumed as "mar".
_MONTH_ALT = "|".join(sorted(MONTHS, key=len, reverse=True))

MONTH_DAY_PATTERN = re.compile(
    rf"\b({_MONTH_ALT})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?\b(?:,?\s*(\d{{4}}))?",
    re.IGNORECASE,
)
DAY_MONTH_PATTERN = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?({_MONTH_ALT})\b\.?(?:,?\s*(\d{{4}}))?",
    re.IGNORECASE,
)
RELATIVE_DAYS_PATTERN = re.compile(r"\b(\d+)\s+days?\b", re.IGNORECASE)

_SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class DateMention:
    """One calendar-date mention found in text."""

    position: int
    year: int
    month: int
    day: int
    explicit_year: bool
    text: str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Serialise a datetime as ISO-8601 UTC with a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning ``None`` for empty/invalid input.

    Naive timestamps are assumed to be UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def at_hour(year: int, month: int, day: int, hour_utc: int = 0) -> datetime | None:
    """Build a UTC datetime, or ``None`` when the day does not exist (Feb 30)."""
    try:
        return datetime(year, month, day, hour_utc, tzinfo=timezone.utc)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Mention scanning
# ---------------------------------------------------------------------------


def iter_date_mentions(
    text: str,
    *,
    now: datetime | None = None,
    day_first: bool = False,
) -> Iterator[DateMention]:
    """Yield every date mention in source order.

    Parameters
    ----------
    text:
        Arbitrary text or HTML.
    now:
        Reference time; its year fills in mentions without a year.
    day_first:
        Also recognise ``<Day> <Month> [<Year>]`` mentions.
    """
    current_year = (now or utc_now()).year
    found: list[DateMention] = []

    for match in MONTH_DAY_PATTERN.finditer(text):
        month = MONTHS[match.group(1).lower()]
        day = int(match.group(2))
        year = int(match.group(3)) if match.group(3) else current_year
        found.append(DateMention(
            position=match.start(), year=year, month=month, day=day,
            explicit_year=match.group(3) is not None, text=match.group(0),
        ))

    if day_first:
        for match in DAY_MONTH_PATTERN.finditer(text):
            day = int(match.group(1))
            month = MONTHS[match.group(2).lower()]
            year = int(match.group(3)) if match.group(3) else current_year
            found.append(DateMention(
                position=match.start(), year=year, month=month, day=day,
                explicit_year=match.group(3) is not None, text=match.group(0),
            ))

    found.sort(key=lambda mention: mention.position)
    for mention in found:
        if 1 <= mention.day <= 31:
            yield mention


def future_dates(
    text: str,
    hour_utc: int = 0,
    now: datetime | None = None,
    *,
    day_first: bool = False,
) -> list[datetime]:
    """Return every mention strictly after *now*, in source order."""
    now = now or utc_now()
    dates: list[datetime] = []
    for mention in iter_date_mentions(text, now=now, day_first=day_first):
        candidate = at_hour(mention.year, mention.month, mention.day, hour_utc)
        if candidate is not None and candidate > now:
            dates.append(candidate)
    return dates


def extract_first_future_date(
    text: str,
    hour_utc: int = 0,
    now: datetime | None = None,
    *,
    day_first: bool = False,
) -> datetime | None:
    """Return the first date mention in *text* that lies after *now*.

    A mention such as "December 3" read after December 3rd of the current
    year is skipped rather than moved to next year.
    """
    dates = future_dates(text, hour_utc, now, day_first=day_first)
    return dates[0] if dates else None


def extract_dates_from_text(
    text: str,
    hour_utc: int = 0,
    now: datetime | None = None,
) -> list[datetime]:
    """Return month-day dates between 7 days ago and 365 days ahead, sorted.

    This is the lenient scan used for Reddit posts: recent past dates are
    kept so a caller can see "it happened last week" as well as upcoming
    announcements.
    """
    now = now or utc_now()
    dates: list[datetime] = []
    for mention in iter_date_mentions(text, now=now):
        candidate = at_hour(mention.year, mention.month, mention.day, hour_utc)
        if candidate is None:
            continue
        offset = days_until(candidate, now)
        if -7 <= offset <= 365:
            dates.append(candidate)
    dates.sort()
    return dates


def extract_relative_days(
    text: str,
    hour_utc: int = 0,
    now: datetime | None = None,
) -> datetime | None:
    """Resolve the first "in N days" style mention, for 0 < N < 365."""
    now = now or utc_now()
    for match in RELATIVE_DAYS_PATTERN.finditer(text):
        days = int(match.group(1))
        if 0 < days < 365:
            target = now + timedelta(days=days)
            return target.replace(hour=hour_utc, minute=0, second=0, microsecond=0)
    return None


def parse_date_text(text: str | None) -> datetime | None:
    """Parse a standalone date string such as ``"December 6, 2024"``.

    Returns midnight UTC, or ``None`` when the text is not a date.
    """
    if not text:
        return None
    try:
        parsed = date_parser.parse(text, fuzzy=False)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Calendar arithmetic
# ---------------------------------------------------------------------------


def days_until(target: datetime, now: datetime | None = None) -> float:
    """Fractional days from *now* to *target* (negative when in the past)."""
    now = now or utc_now()
    return (target - now).total_seconds() / _SECONDS_PER_DAY


def add_months(value: datetime, months: int) -> datetime:
    """Calendar-month arithmetic; the day clamps to the end of short months."""
    return value + relativedelta(months=months)


def add_days(value: datetime, days: float) -> datetime:
    return value + timedelta(days=days)


def first_weekday_of_month(year: int, month: int, weekday: int, hour_utc: int = 0) -> datetime:
    """Return the first ``weekday`` (Monday=0) of a month at ``hour_utc``."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    day = first + timedelta(days=offset)
    return datetime(day.year, day.month, day.day, hour_utc, tzinfo=timezone.utc)


def in_window(target: datetime, min_days: float | None, max_days: float | None, now: datetime) -> bool:
    """True when *target* lies within ``[min_days, max_days]`` days of *now*.

    ``None`` bounds are open; a ``None`` minimum still requires a future date.
    """
    offset = days_until(target, now)
    if min_days is None:
        if offset <= 0:
            return False
    elif offset < min_days:
        return False
    if max_days is not None and offset > max_days:
        return False
    return True
