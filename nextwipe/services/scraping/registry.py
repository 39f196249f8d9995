"""Per-game strategy chains.

Every tracked game maps to an ordered list of strategies, built here from
the shared source providers.  Order is official source first, then wikis
and community feeds, then the deterministic fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping

from nextwipe.config.games import GameProfile
from nextwipe.interfaces.announcement_provider import Announcement, IAnnouncementProvider
from nextwipe.interfaces.page_provider import IPageProvider
from nextwipe.models.wipe import SpecialEvent, WipeData
from nextwipe.services.scraping import fallbacks
from nextwipe.services.scraping.base import ScrapeContext, ScrapeStrategy
from nextwipe.services.scraping.browser_games import (
    FORTNITE_CLIENTS,
    FortniteCountdownStrategy,
    Poe2ForumStrategy,
    PoeLeagueStrategy,
)
from nextwipe.services.scraping.scraper import GameScraper
from nextwipe.services.scraping.strategies import (
    AnnouncementFeedStrategy,
    ComputedStrategy,
    KnownScheduleStrategy,
    PageDateStrategy,
)
from nextwipe.utils.dates import extract_first_future_date, extract_relative_days, utc_now
from nextwipe.utils.errors import ConfigurationError


@dataclass(frozen=True)
class SourceProviders:
    """The providers every chain draws from."""

    reddit: IAnnouncementProvider
    steam: IAnnouncementProvider
    forum: IAnnouncementProvider
    pages: IPageProvider
    browser_pages: IPageProvider


# ---------------------------------------------------------------------------
# Escape from Tarkov
# ---------------------------------------------------------------------------

_TARKOV_OFFICIAL_AUTHORS = frozenset({"trainfender", "bstategames", "automoderator"})
_TARKOV_RELEASE_TERMS = ("release", "launch", "1.0", "version 1.0")


class TarkovAnnouncementStrategy(AnnouncementFeedStrategy):
    """Stickied or developer posts on r/EscapefromTarkov.

    Dates may be written as "December 5" or "in 10 days"; posts about the
    1.0 release are flagged ``is_release``.
    """

    def _accepts(self, post: Announcement) -> bool:
        return post.stickied or post.author.lower() in _TARKOV_OFFICIAL_AUTHORS

    def _find_date(self, ctx: ScrapeContext, post: Announcement) -> datetime | None:
        hour = ctx.profile.release_hour_utc
        return extract_first_future_date(post.text, hour, ctx.now) or extract_relative_days(
            post.text, hour, ctx.now
        )

    def _build(self, ctx: ScrapeContext, post: Announcement, target: datetime) -> WipeData:
        is_release = any(term in post.text.lower() for term in _TARKOV_RELEASE_TERMS)
        return ctx.record(
            target,
            source=self._source,
            confirmed=True,
            announcement=post.title,
            is_release=is_release,
            frequency="Official 1.0 Release" if is_release else None,
        )


# ---------------------------------------------------------------------------
# Chain builders
# ---------------------------------------------------------------------------


def _reddit(
    p: SourceProviders,
    subreddit: str,
    keywords: list[str],
    exclude: list[str],
    **options,
) -> AnnouncementFeedStrategy:
    return AnnouncementFeedStrategy(
        p.reddit,
        subreddit,
        source=f"r/{subreddit}",
        keywords=keywords,
        exclude=exclude,
        name=f"reddit:{subreddit}",
        **options,
    )


def _wiki(p: SourceProviders, url: str, domain: str, **options) -> PageDateStrategy:
    return PageDateStrategy(p.pages, url, source=domain, name=f"wiki:{domain}", **options)


def _news_page(
    p: SourceProviders,
    url: str,
    anchor: str,
    announcement: str,
    back_days: int,
    ahead_days: int,
    estimate_note: str,
) -> list[ScrapeStrategy]:
    return [
        PageDateStrategy(
            p.browser_pages, url, source=url, anchor=anchor, announcement=announcement,
            wait_ms=3000, name=f"browser:{url}",
        ),
        ComputedStrategy(fallbacks.offset_estimate(back_days, ahead_days, url, estimate_note)),
    ]


def _utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def _rust(p: SourceProviders) -> list[ScrapeStrategy]:
    return [ComputedStrategy(fallbacks.rust_force_wipe, name="first_thursday")]


def _tarkov(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        TarkovAnnouncementStrategy(
            p.reddit,
            "EscapefromTarkov",
            source="r/EscapefromTarkov (Official Announcement)",
            keywords=["wipe", "reset", "patch notes", "update", "release", "launch", "1.0", "version 1.0"],
            limit=25,
            sort="hot",
            name="reddit:EscapefromTarkov",
        ),
        ComputedStrategy(fallbacks.tarkov_estimate),
    ]


def _poe(p: SourceProviders) -> list[ScrapeStrategy]:
    return [PoeLeagueStrategy(p.browser_pages)]


def _poe2(p: SourceProviders) -> list[ScrapeStrategy]:
    return [Poe2ForumStrategy(p.browser_pages)]


def _fortnite(p: SourceProviders) -> list[ScrapeStrategy]:
    return [FortniteCountdownStrategy(p.browser_pages, *client) for client in FORTNITE_CLIENTS]


def _diablo4(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        KnownScheduleStrategy(
            _utc(2025, 12, 9, 18),
            last_wipe=_utc(2025, 9, 23, 17),
            pages=p.pages,
            url="https://www.millenium.org/news/428375.html",
            confirm_patterns=[r"Season\s+11", r"9\s+d[ée]cembre"],
            source="Millenium.org (Gaming News)",
            announcement="Diablo IV Season 11",
            event_type="season",
            name="millenium",
        ),
        PageDateStrategy(
            p.pages,
            "https://news.blizzard.com/en-us/feed/diablo-4",
            source="news.blizzard.com (Official)",
            anchor=r"(?:Diablo(?:\s+IV)?\s+)?Season\s+(\d+)",
            exclude=["ptr", "ptb", "public test", "hotfix", "patch notes"],
            announcement="Diablo IV Season {0}",
            name="blizzard_news",
        ),
        _reddit(
            p, "diablo4",
            ["season", "season of", "new season", "season announcement"],
            ["ptr", "ptb", "discussion", "question", "help"],
            limit=25, sort="hot",
        ),
        ComputedStrategy(fallbacks.diablo4_estimate),
    ]


def _lastepoch(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        AnnouncementFeedStrategy(
            p.forum,
            "https://forum.lastepoch.com/c/announcements/37.json",
            source="forum.lastepoch.com (Official)",
            keywords=["cycle", "season", "patch", "harbingers", "reset", "new content"],
            exclude=["poll", "survey", "hotfix", "bugfix", "maintenance"],
            date_scan="first",
            recent_post_lead_days=14,
            recent_post_source="forum.lastepoch.com (Estimated from recent announcement)",
            name="forum:lastepoch",
        ),
        _reddit(
            p, "LastEpoch",
            ["cycle", "season", "new cycle", "next cycle", "patch", "update"],
            ["poll", "survey", "bug", "build", "help"],
            limit=25, sort="hot", required_flair="news", min_days=1, max_days=180,
        ),
        AnnouncementFeedStrategy(
            p.steam,
            "899770",
            source="Steam News (Official)",
            keywords=["cycle", "season", "new content", "major update", "harbingers"],
            limit=10,
            date_scan="first",
            min_days=1,
            max_days=180,
            name="steam:899770",
        ),
        ComputedStrategy(fallbacks.lastepoch_estimate),
    ]


def _valorant(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        _wiki(p, "https://valorant.fandom.com/wiki/Act", "valorant.fandom.com", day_first=True),
        _reddit(
            p, "VALORANT",
            ["episode", "act", "new act", "act announcement", "season 2025"],
            ["discussion", "question", "help", "bug", "tier list"],
        ),
        ComputedStrategy(fallbacks.valorant_estimate),
    ]


def _lol(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        _reddit(
            p, "leagueoflegends",
            ["season 2025", "season 2026", "split 1", "split 2", "split 3", "new season", "ranked season"],
            ["discussion", "question", "help", "esports", "lcs", "lec", "lck", "tournament"],
        ),
        _wiki(p, "https://leagueoflegends.fandom.com/wiki/Season", "leagueoflegends.fandom.com"),
        ComputedStrategy(fallbacks.lol_estimate),
    ]


_TFT_SET16_EVENTS = [
    SpecialEvent(
        name="Set 16 Global Reveal at K.O. Coliseum",
        date="2025-11-16T00:00:00.000Z",
        type="reveal",
        description="Global reveal during Tactician's Crown tournament (Nov 14-16)",
    ),
    SpecialEvent(
        name="Set 16 PBE Release",
        date="2025-11-18T18:00:00.000Z",
        type="beta",
        description="Test server release for Set 16: Lore & Legends",
    ),
]


def _tft(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        _reddit(
            p, "TeamfightTactics",
            ["new set", "set 13", "set 14", "set 15", "mid-set", "midset", "set announcement", "upcoming set"],
            ["discussion", "question", "help", "comp", "guide", "meta"],
        ),
        _wiki(p, "https://leagueoflegends.fandom.com/wiki/Teamfight_Tactics", "leagueoflegends.fandom.com"),
        KnownScheduleStrategy(
            _utc(2025, 12, 3, 18),
            last_wipe=_utc(2025, 11, 19, 18),
            source="Official Riot Games announcement",
            announcement="Set 16: Lore & Legends - The biggest set in TFT history",
            event_type="season",
            event_name="Lore & Legends",
            special_events=_TFT_SET16_EVENTS,
            name="set16_schedule",
        ),
        ComputedStrategy(fallbacks.tft_estimate),
    ]


def _apex(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        PageDateStrategy(
            p.pages,
            "https://www.ea.com/games/apex-legends/news",
            source="ea.com/games/apex-legends/news",
            require=r"Season\s+(27|28|29)",
            day_first=True,
            name="ea_news",
        ),
        _reddit(
            p, "apexlegends",
            ["season 27", "season 28", "season 29", "new season", "season announcement"],
            ["tier list", "looking for", "lfg", "best legend", "tips", "how to"],
        ),
        ComputedStrategy(fallbacks.apex_estimate),
    ]


def _cod(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        _reddit(
            p, "CODWarzone",
            ["season", "new season", "season announcement", "season reloaded"],
            ["discussion", "question", "help", "loadout", "meta"],
        ),
        _wiki(p, "https://callofduty.fandom.com/wiki/Season", "callofduty.fandom.com"),
        ComputedStrategy(fallbacks.cod_estimate),
    ]


def _rocketleague(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        _wiki(p, "https://rocketleague.fandom.com/wiki/Seasons", "rocketleague.fandom.com"),
        _reddit(
            p, "RocketLeague",
            ["new season", "season", "competitive season", "ranked season"],
            ["discussion", "question", "help", "tips", "rlcs"],
        ),
        ComputedStrategy(fallbacks.rocketleague_estimate),
    ]


def _dbd(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        _reddit(
            p, "deadbydaylight",
            ["chapter", "new chapter", "chapter announcement", "ptb", "public test build"],
            ["discussion", "question", "help", "build", "perk"],
        ),
        _wiki(p, "https://deadbydaylight.fandom.com/wiki/Chapters", "deadbydaylight.fandom.com"),
        ComputedStrategy(fallbacks.dbd_estimate),
    ]


def _pubg(p: SourceProviders) -> list[ScrapeStrategy]:
    return [
        AnnouncementFeedStrategy(
            p.steam,
            "578080",
            source="Steam News (Official)",
            keywords=["season", "ranked season", "new season", "season announcement"],
            exclude=["patch notes", "hotfix", "maintenance", "update notes"],
            limit=10,
            date_scan="first",
            name="steam:578080",
        ),
        _reddit(
            p, "PUBATTLEGROUNDS",
            ["season", "ranked season", "new season"],
            ["discussion", "question", "help"],
        ),
        ComputedStrategy(fallbacks.pubg_estimate),
    ]


def _overwatch2(p: SourceProviders) -> list[ScrapeStrategy]:
    return _news_page(
        p, "https://overwatch.blizzard.com/en-us/news/", r"\bseason\s+(\d+)", "Overwatch 2 Season {0}",
        30, 35, "Check official Overwatch news for confirmed dates",
    )


def _destiny2(p: SourceProviders) -> list[ScrapeStrategy]:
    return _news_page(
        p, "https://www.bungie.net/", r"\b(?:season|episode)\b", "Destiny 2 season announcement",
        45, 45, "Check Bungie.net for confirmed season dates",
    )


def _r6siege(p: SourceProviders) -> list[ScrapeStrategy]:
    return _news_page(
        p, "https://www.ubisoft.com/en-us/game/rainbow-six/siege", r"\b(?:season|operation)\b",
        "Rainbow Six Siege season announcement",
        45, 45, "Check Ubisoft news for confirmed season dates",
    )


def _warframe(p: SourceProviders) -> list[ScrapeStrategy]:
    return _news_page(
        p, "https://www.warframe.com/news", r"\b(?:update|release)\b", "Warframe update announcement",
        90, 90, "Check Warframe.com for confirmed update dates",
    )


CHAIN_BUILDERS: dict[str, Callable[[SourceProviders], list[ScrapeStrategy]]] = {
    "rust": _rust,
    "tarkov": _tarkov,
    "poe": _poe,
    "fortnite": _fortnite,
    "diablo4": _diablo4,
    "lastepoch": _lastepoch,
    "valorant": _valorant,
    "lol": _lol,
    "tft": _tft,
    "apex": _apex,
    "cod": _cod,
    "rocketleague": _rocketleague,
    "dbd": _dbd,
    "pubg": _pubg,
    "overwatch2": _overwatch2,
    "destiny2": _destiny2,
    "r6siege": _r6siege,
    "poe2": _poe2,
    "warframe": _warframe,
}


def build_scrapers(
    profiles: Mapping[str, GameProfile],
    providers: SourceProviders,
    clock: Callable[[], datetime] = utc_now,
) -> dict[str, GameScraper]:
    """Build one :class:`GameScraper` per profile.

    Raises
    ------
    ConfigurationError
        If a profile has no strategy chain.
    """
    scrapers: dict[str, GameScraper] = {}
    for game_id, profile in profiles.items():
        builder = CHAIN_BUILDERS.get(game_id)
        if builder is None:
            raise ConfigurationError(
                message=f"No scraper chain for game '{game_id}'",
                provider_name="registry",
            )
        scrapers[game_id] = GameScraper(profile, builder(providers), clock=clock)
    return scrapers
