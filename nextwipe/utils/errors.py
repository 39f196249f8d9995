"""Custom exception hierarchy for nextwipe.

All application exceptions inherit from :class:`NextWipeError`, which
carries an optional ``provider_name`` so error handlers can identify which
upstream source (e.g. "reddit", "steam_news", "browser") caused the
failure.

The hierarchy follows the path a request takes through the service:

    NextWipeError  (base -- catch-all for any nextwipe error)
    +-- SourceUnavailableError   (a source fetch could not complete)
    +-- ScrapeError              (every strategy for a game came up empty)
    +-- CacheError               (cache read/write failure)
    +-- UnknownGameError         (game id not in the registry)
    +-- WipeDataUnavailableError (scrape failed and no cache to fall back on)
    +-- ConfigurationError       (startup / invalid config)

Source failures are almost never surfaced to a caller: fetchers swallow
them into ``None`` and strategies move on.  Only ``ScrapeError`` and
``WipeDataUnavailableError`` reach the route layer.
"""


class NextWipeError(Exception):
    """Base exception for all nextwipe errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying the source that triggered the error.
    ``__str__`` prefixes the provider name in brackets, e.g.
    ``[reddit] Subreddit unavailable``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Source errors
# ---------------------------------------------------------------------------

class SourceUnavailableError(NextWipeError):
    """Raised when an upstream source is unreachable or the browser is down.

    Scrape strategies catch this and fall through to the next source.
    """

    def __init__(
        self,
        message: str = "Source is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ScrapeError(NextWipeError):
    """Raised when every strategy for a game failed and no fallback exists."""

    def __init__(
        self,
        message: str = "All scraping strategies failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Cache / lookup errors
# ---------------------------------------------------------------------------

class CacheError(NextWipeError):
    """Raised by cache backends on read/write failure.

    The file backend logs it and treats the operation as a miss or a no-op.
    """

    def __init__(
        self,
        message: str = "Cache operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnknownGameError(NextWipeError):
    """Raised when a game id is not present in the game registry."""

    def __init__(
        self,
        message: str = "Unknown game",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class WipeDataUnavailableError(NextWipeError):
    """Raised when a scrape failed and there is no cached copy to serve."""

    def __init__(
        self,
        message: str = "Failed to fetch wipe data",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(NextWipeError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
