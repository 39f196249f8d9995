"""Abstract base class for wipe-record cache stores.

One record per game, keyed by the game's cache key (``poe2-league``).  The
default backend writes one JSON file per key; an in-memory backend exists
for tests and disk-less deployments.  The wipe service only talks to this
interface, so backends can be swapped in ``main.py``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from nextwipe.models.wipe import WipeData


class IWipeCacheProvider(ABC):
    """Contract for the per-game ``WipeData`` store.

    Implementations must not raise on I/O trouble: a failed read is a miss
    and a failed write is logged and dropped.
    """

    @abstractmethod
    async def read(self, key: str) -> WipeData | None:
        """Return the last record stored under *key*.

        Parameters
        ----------
        key:
            The game's cache key, e.g. ``"rust-wipe"``.

        Returns
        -------
        WipeData or None
            ``None`` when nothing is stored or the stored copy is unreadable.
        """

    @abstractmethod
    async def write(self, key: str, data: WipeData) -> None:
        """Persist *data* under *key*, replacing any previous record.

        Parameters
        ----------
        key:
            The game's cache key.
        data:
            The record to store.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short backend name for logs, e.g. ``"json_file"``."""
