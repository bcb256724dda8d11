"""Concurrency primitives shared by the ingestion and chat services.

Two patterns are exposed:

1. **with_timeout** -- bounds a single external call (file fetch,
   embedding, generation).  On expiry the awaitable is cancelled and the
   caller-supplied error factory decides which domain exception is raised,
   so a timeout follows the same failure path as the step it interrupts.

2. **KeyedLock** -- a single-writer lock per key (document id).  Ingestion
   triggers for the same document are serialised inside one process while
   different documents proceed in parallel with no coordination.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def with_timeout(
    awaitable: Awaitable[_T],
    seconds: float | None,
    on_timeout: Callable[[float], Exception],
) -> _T:
    """Await *awaitable*, raising ``on_timeout(seconds)`` if it takes too long.

    Parameters
    ----------
    awaitable:
        The external call to bound.
    seconds:
        Timeout in seconds.  ``None`` or a non-positive value disables the
        bound and simply awaits.
    on_timeout:
        Factory building the exception to raise; receives the timeout value.
    """
    if seconds is None or seconds <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        _logger.warning("external_call_timeout", timeout_seconds=seconds)
        raise on_timeout(seconds) from exc


class KeyedLock:
    """Hands out one :class:`asyncio.Lock` per key.

    Locks are created lazily and dropped once no task holds or waits on
    them, so the registry does not grow with the number of documents ever
    processed.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Acquire the lock for *key* for the duration of the block."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_held(self, key: str) -> bool:
        """Return ``True`` if some task currently holds the lock for *key*."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
