"""Utility modules for nextwipe.

- **dates** -- month/day extraction from free text, calendar arithmetic and
  the plausibility-window check every scraper applies.
- **errors** -- exception hierarchy rooted at NextWipeError.
- **concurrency** -- all-settled gather and the minimum-interval rate gate.
- **logging** -- structlog setup with the dual console/JSON renderer.
"""

# -- Domain exception hierarchy --------------------------------------------
from nextwipe.utils.errors import (
    CacheError,
    ConfigurationError,
    NextWipeError,
    ScrapeError,
    SourceUnavailableError,
    UnknownGameError,
    WipeDataUnavailableError,
)

# -- Async concurrency helpers ---------------------------------------------
from nextwipe.utils.concurrency import RateGate, gather_settled

# -- Structured logging setup ----------------------------------------------
from nextwipe.utils.logging import configure_logging, get_logger

__all__ = [
    "CacheError",
    "ConfigurationError",
    "NextWipeError",
    "RateGate",
    "ScrapeError",
    "SourceUnavailableError",
    "UnknownGameError",
    "WipeDataUnavailableError",
    "configure_logging",
    "gather_settled",
    "get_logger",
]
