"""Shared concurrency primitives.

Two patterns live here:

1. **gather_settled** -- ``asyncio.gather`` with ``return_exceptions=True``
   behind an optional semaphore.  The cron fan-out uses it as an
   all-settled join: one failing game never aborts the batch.

2. **RateGate** -- a minimum-interval gate shared by every caller that
   holds a reference to it.  The Reddit provider holds one gate for all
   subreddits so bursts across games still respect the upstream limit.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, TypeVar

import structlog

from nextwipe.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def gather_settled(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
) -> list[_T | BaseException]:
    """Run awaitables concurrently and collect every outcome.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore bounding how many run at once.  ``None`` runs
        them all immediately.

    Returns
    -------
    list[_T | BaseException]
        Results in input order; failures appear as the raised exception.
    """

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        if semaphore is None:
            return await coro
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=True)


class RateGate:
    """Enforce a minimum delay between consecutive callers.

    ``wait()`` sleeps until at least ``min_interval`` seconds have passed
    since the previous ``wait()`` returned.  The lock serialises callers so
    two coroutines cannot slip through the same window.
    """

    def __init__(self, min_interval: float, name: str = "rate_gate") -> None:
        self._min_interval = min_interval
        self._name = name
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def wait(self) -> None:
        async with self._lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self._min_interval:
                delay = self._min_interval - elapsed
                _logger.debug("rate_gate_wait", gate=self._name, delay_s=round(delay, 2))
                await asyncio.sleep(delay)
            self._last_request_time = time.monotonic()
