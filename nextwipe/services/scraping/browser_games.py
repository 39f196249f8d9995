"""Browser-rendered scrapers for Path of Exile, Path of Exile 2 and Fortnite.

These pages only render their data client-side, so they are loaded
through the shared headless browser and parsed with BeautifulSoup.  None
of these games has an estimate fallback: when the page cannot be loaded
the strategy returns ``None`` and the scraper raises ``ScrapeError``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from bs4 import BeautifulSoup

from nextwipe.interfaces.page_provider import IPageProvider
from nextwipe.models.wipe import WipeData
from nextwipe.services.scraping.base import ScrapeContext, ScrapeStrategy
from nextwipe.utils.dates import add_days, add_months, parse_date_text, parse_iso
from nextwipe.utils.logging import get_logger

logger = get_logger(__name__)

POE_LADDERS_URL = "https://www.pathofexile.com/ladders"
POE_NEWS_URL = "https://www.pathofexile.com/forum/view-forum/news"
POE2_FORUM_URL = "https://www.pathofexile.com/forum/view-forum/2212"
FORTNITE_COUNTDOWN_URL = "https://fortnite.gg/season-countdown"

_POST_SELECTOR = ".title, .announcement, .newsPost, [class*='post']"
_DATE_TEXT = re.compile(r"(\w+\s+\d+,\s*\d{4})")
_ANNOUNCED_DATE_TEXT = re.compile(
    r"(?:starts?|begins?|launches?|coming)[:\s]+(\w+\s+\d+(?:st|nd|rd|th)?,?\s*\d{4})",
    re.IGNORECASE,
)
_VERSION = re.compile(r"(\d+\.\d+\.\d+[a-z]?)", re.IGNORECASE)
_PERMANENT_LEAGUES = ("standard", "hardcore", "ruthless")


@dataclass(frozen=True)
class ForumPost:
    """A classified announcement from a pathofexile.com forum listing."""

    kind: str
    title: str
    date_text: str | None = None


def _post_texts(html: str | None) -> list[str]:
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    texts = []
    for node in soup.select(_POST_SELECTOR):
        text = " ".join(node.get_text(" ").split())
        if text:
            texts.append(text)
    return texts


def _date_text(text: str, announced_first: bool = True) -> str | None:
    if announced_first:
        match = _ANNOUNCED_DATE_TEXT.search(text)
        if match:
            return match.group(1)
    match = _DATE_TEXT.search(text)
    return match.group(1) if match else None


def _is_league_post(lowered: str, triggers: tuple[str, ...]) -> bool:
    return "league" in lowered and any(word in lowered for word in triggers)


def _parse_posted_date(text: str | None) -> datetime | None:
    return parse_date_text(re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", text)) if text else None


# ---------------------------------------------------------------------------
# Path of Exile
# ---------------------------------------------------------------------------


def ladder_leagues(html: str | None) -> list[str]:
    """Temporary league/event names offered by the ladder's league selector."""
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    selector = soup.select_one("select[name='league'], .league-select")
    if selector is None:
        return []
    names = []
    for option in selector.find_all("option"):
        name = option.get_text(strip=True)
        if not name or not option.get("value"):
            continue
        if any(word in name.lower() for word in _PERMANENT_LEAGUES):
            continue
        names.append(name)
    return names


def classify_poe_news(html: str | None) -> ForumPost | None:
    """Pick the most relevant PoE news post.

    A league announcement anywhere on the page wins; otherwise the first
    patch-notes or special-event post in page order is used.
    """
    fallback: ForumPost | None = None
    for text in _post_texts(html):
        lowered = text.lower()
        if _is_league_post(lowered, ("announce", "launch", "start", "coming")):
            return ForumPost("league", text, _date_text(text))
        if fallback is not None:
            continue
        if "patch notes" in lowered or ("patch" in lowered and "notes" in lowered):
            version = _VERSION.search(text)
            title = f"Patch {version.group(1)}" if version else text
            fallback = ForumPost("patch", title, _date_text(text, announced_first=False))
        elif any(w in lowered for w in ("event", "race", "boss kill")) and any(
            w in lowered for w in ("announce", "start", "live")
        ):
            fallback = ForumPost("event", text, _date_text(text))
    return fallback


class PoeLeagueStrategy(ScrapeStrategy):
    """Path of Exile ladders (active events) and news (announced leagues)."""

    name = "poe:ladders+news"

    def __init__(self, pages: IPageProvider) -> None:
        self._pages = pages

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        ladders = await self._pages.fetch_page(POE_LADDERS_URL, wait_ms=2000)
        news = await self._pages.fetch_page(POE_NEWS_URL, wait_ms=3000)
        if ladders is None and news is None:
            return None
        return self.build(ctx, ladder_leagues(ladders), classify_poe_news(news))

    @staticmethod
    def build(ctx: ScrapeContext, leagues: list[str], post: ForumPost | None) -> WipeData:
        now = ctx.now
        source = f"{POE_LADDERS_URL} & news"

        def _record(next_wipe, last_wipe, confirmed, announcement, event_type, event_name):
            return ctx.record(
                next_wipe,
                last_wipe=last_wipe,
                source=source,
                confirmed=confirmed,
                announcement=announcement,
                event_type=event_type,
                event_name=event_name or None,
                frequency="Special events vary" if event_type == "event" else None,
            )

        current = leagues[0] if leagues else ""
        if current and any(w in current.lower() for w in ("event", "race", "boss kill")):
            return _record(
                add_days(now, 7), add_days(now, -7), True, f"Active Event: {current}", "event", current
            )

        if post is not None:
            when = _parse_posted_date(post.date_text)
            if when is not None and when > now:
                return _record(when, add_months(when, -3), True, post.title, post.kind, post.title)
            if when is not None:
                return _record(
                    add_months(when, 3), when, False,
                    "Next league date not yet announced", "league", current,
                )
            if post.kind == "patch":
                return _record(
                    add_months(now, 3), add_days(now, -1), True, f"Latest: {post.title}", "patch", post.title
                )
            return _record(add_months(now, 1), add_months(now, -3), False, post.title, "league", current)

        return _record(
            add_months(now, 1), add_months(now, -3), False,
            "Next league date not yet announced - check official sources", "league", current,
        )


# ---------------------------------------------------------------------------
# Path of Exile 2
# ---------------------------------------------------------------------------

# kind -> (cycle days, frequency)
_POE2_KINDS: dict[str, tuple[int, str]] = {
    "league": (90, "Leagues every ~13 weeks"),
    "update": (30, "Major updates periodically"),
    "event": (14, "Special events vary"),
    "patch": (7, "Patches every 1-2 weeks (Early Access)"),
}

_POE2_DEFAULT_ANNOUNCEMENT = {
    "league": "League announcement - check official site",
    "update": "Major update coming",
    "event": "Special event - check announcements",
    "patch": "Regular patches and hotfixes",
}

_POE2_PAST_ANNOUNCEMENT = {
    "league": "Next league date not yet announced",
    "update": "Next update date not yet announced",
    "event": "Check announcements for upcoming events",
    "patch": "Latest patch available - next patch coming soon",
}


def classify_poe2_forum(html: str | None) -> ForumPost:
    """Classify the PoE2 announcements forum: league > update > patch > event."""
    found: ForumPost | None = None
    for text in _post_texts(html):
        lowered = text.lower()
        if _is_league_post(lowered, ("announce", "launch", "start")):
            return ForumPost("league", text, _date_text(text))
        if found is not None and found.kind == "update":
            continue
        if "expansion" in lowered or "major update" in lowered:
            found = ForumPost("update", text, _date_text(text, announced_first=False))
            continue
        if found is not None:
            continue
        if "patch notes" in lowered or "hotfix" in lowered:
            version = _VERSION.search(text)
            if version:
                found = ForumPost("patch", f"Patch {version.group(1)}", _date_text(text, announced_first=False))
                continue
        if any(w in lowered for w in ("event", "race", "competition")):
            found = ForumPost("event", text, _date_text(text, announced_first=False))
    return found or ForumPost("patch", "")


class Poe2ForumStrategy(ScrapeStrategy):
    """Path of Exile 2 announcements forum."""

    name = "poe2:forum"

    def __init__(self, pages: IPageProvider) -> None:
        self._pages = pages

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        html = await self._pages.fetch_page(POE2_FORUM_URL, wait_ms=3000)
        if html is None:
            return None
        return self.build(ctx, classify_poe2_forum(html))

    @staticmethod
    def build(ctx: ScrapeContext, post: ForumPost) -> WipeData:
        offset, frequency = _POE2_KINDS[post.kind]
        when = _parse_posted_date(post.date_text)

        if when is not None and when > ctx.now:
            next_wipe, last_wipe, confirmed = when, add_days(when, -offset), True
            announcement = post.title or f"{post.kind.title()} starts {post.date_text}"
        elif when is not None:
            next_wipe, last_wipe, confirmed = add_days(when, offset), when, False
            if post.kind == "patch" and post.title:
                announcement = post.title
            else:
                announcement = _POE2_PAST_ANNOUNCEMENT[post.kind]
        else:
            next_wipe, last_wipe, confirmed = add_days(ctx.now, offset), add_days(ctx.now, -offset), False
            announcement = post.title or _POE2_DEFAULT_ANNOUNCEMENT[post.kind]

        return ctx.record(
            next_wipe,
            last_wipe=last_wipe,
            frequency=frequency,
            source=POE2_FORUM_URL,
            confirmed=confirmed,
            announcement=announcement,
            event_type=post.kind,
            event_name=post.title or None,
        )


# ---------------------------------------------------------------------------
# Fortnite
# ---------------------------------------------------------------------------

FORTNITE_CLIENTS: list[tuple[str, str, dict[str, str]]] = [
    (
        "chrome-windows",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36",
        {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Upgrade-Insecure-Requests": "1",
        },
    ),
    (
        "firefox-mac",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:131.0) Gecko/20100101 Firefox/131.0",
        {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "DNT": "1",
        },
    ),
    (
        "safari-mac",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/17.1 Safari/605.1.15",
        {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        },
    ),
]

_SCRIPT_ISO = re.compile(r"[\"'](\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[^\"']*)[\"']")
_SCRIPT_TIMESTAMP = re.compile(r"(?:endTime|endDate|countdown|target)[\"'\s:=]+(\d{13})")


def _from_millis(value: str | None) -> datetime | None:
    try:
        millis = int(value or "")
    except ValueError:
        return None
    if millis <= 0:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _digits(node) -> int:
    if node is None:
        return 0
    digits = re.sub(r"\D", "", node.get_text())
    return int(digits) if digits else 0


def extract_season_end(html: str, now: datetime) -> tuple[datetime, str] | None:
    """Find the season-end time on the fortnite.gg countdown page.

    Sources are tried in order of reliability; the second element of the
    result names the one that matched (``data-target``, ``json-ld``, ...).
    """
    soup = BeautifulSoup(html, "html.parser")

    node = soup.select_one("#big-countdown[data-target]") or soup.select_one("[data-target]")
    if node is not None:
        when = _from_millis(node.get("data-target"))
        if when is not None:
            return when, "data-target"

    for script in soup.select("script[type='application/ld+json']"):
        try:
            data = json.loads(script.string or "")
        except ValueError:
            continue
        end = data.get("endDate") if isinstance(data, dict) else None
        when = parse_iso(end) if isinstance(end, str) else None
        if when is not None:
            return when, "json-ld"

    for script in soup.find_all("script"):
        content = script.string or ""
        if not any(k in content for k in ("countdown", "endDate", "seasonEnd")):
            continue
        iso = _SCRIPT_ISO.search(content)
        if iso and parse_iso(iso.group(1)):
            return parse_iso(iso.group(1)), "script-iso"
        stamp = _SCRIPT_TIMESTAMP.search(content)
        when = _from_millis(stamp.group(1)) if stamp else None
        if when is not None:
            return when, "script-timestamp"

    meta = soup.select_one("meta[property*='end'], meta[name*='end']")
    if meta is not None:
        when = parse_iso(meta.get("content")) or parse_date_text(meta.get("content"))
        if when is not None:
            return when, "meta"

    attr_node = soup.select_one("[data-end-date], [data-countdown], [data-end-time], [data-time]")
    if attr_node is not None:
        raw = next(
            (attr_node.get(a) for a in ("data-end-date", "data-countdown", "data-end-time", "data-time") if attr_node.get(a)),
            None,
        )
        if raw and raw.isdigit() and int(raw) > 1_000_000_000_000:
            when = _from_millis(raw)
            if when is not None:
                return when, "data-attr-timestamp"
        when = parse_iso(raw) or parse_date_text(raw)
        if when is not None:
            return when, "data-attr"

    days = soup.select_one("[class*='day' i]:not([class*='birthday'])")
    hours = soup.select_one("[class*='hour' i]")
    if days is not None or hours is not None:
        delta = timedelta(
            days=_digits(days),
            hours=_digits(hours),
            minutes=_digits(soup.select_one("[class*='minute' i]")),
            seconds=_digits(soup.select_one("[class*='second' i]")),
        )
        if delta.total_seconds() > 0:
            return now + delta, "calculated"
    return None


class FortniteCountdownStrategy(ScrapeStrategy):
    """fortnite.gg season countdown, loaded with one browser identity."""

    def __init__(self, pages: IPageProvider, client: str, user_agent: str, headers: dict[str, str]) -> None:
        self._pages = pages
        self._user_agent = user_agent
        self._headers = headers
        self.name = f"fortnite.gg:{client}"

    async def attempt(self, ctx: ScrapeContext) -> WipeData | None:
        html = await self._pages.fetch_page(
            FORTNITE_COUNTDOWN_URL, user_agent=self._user_agent, headers=self._headers, wait_ms=5000
        )
        if not html:
            return None
        if "Checking your browser" in html or "cf-browser-verification" in html:
            logger.warning("fortnite_challenge_page", strategy=self.name)
            return None

        found = extract_season_end(html, ctx.now)
        if found is None:
            logger.warning("fortnite_countdown_not_found", strategy=self.name)
            return None
        when, origin = found
        return ctx.record(
            when,
            last_wipe=add_days(when, -70),
            source=f"fortnite.gg ({origin})",
            confirmed=origin == "data-target",
        )
