"""Per-game scraping: strategies, fallbacks and the game registry.

Each game's :class:`GameScraper` walks an ordered list of strategies
(official source, wiki/community, Reddit, fallback) and returns the first
record produced.  :func:`build_scrapers` wires the chains to the shared
providers at startup.
"""

from nextwipe.services.scraping.base import ScrapeContext, ScrapeStrategy
from nextwipe.services.scraping.registry import CHAIN_BUILDERS, SourceProviders, build_scrapers
from nextwipe.services.scraping.scraper import GameScraper

__all__ = [
    "CHAIN_BUILDERS",
    "GameScraper",
    "ScrapeContext",
    "ScrapeStrategy",
    "SourceProviders",
    "build_scrapers",
]
