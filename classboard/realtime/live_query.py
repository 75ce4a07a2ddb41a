from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar

from classboard.core.exceptions import StoreUnavailableError
from classboard.realtime.feed import ChangeFeed, SnapshotCache, change_feed, snapshot_cache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LiveQuery(Generic[T]):
    """One merged view of a query: a one-shot fetch plus change notifications.

    Entering the context subscribes to the topic and runs the fetch. Every
    notification re-runs the query and the result becomes the pushed value,
    which wins over the fetched one from then on. While the store is offline
    the last known value is kept and the failure goes to `on_error`.
    Leaving the context unsubscribes.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        *,
        default: T,
        on_error: Optional[Callable[[Exception], Any]] = None,
        feed: ChangeFeed = change_feed,
        cache: SnapshotCache = snapshot_cache,
    ) -> None:
        self.name = name
        self._fetch = fetch
        self._on_error = on_error
        self._feed = feed
        self._cache = cache
        self._cached: T = cache.get(name, default)
        self._fetched: Optional[T] = None
        self._has_fetched = False
        self._pushed: Optional[T] = None
        self._has_pushed = False
        self._queue = None

    @property
    def value(self) -> T:
        if self._has_pushed:
            return self._pushed
        if self._has_fetched:
            return self._fetched
        return self._cached

    @property
    def is_subscribed(self) -> bool:
        return self._queue is not None

    async def __aenter__(self) -> "LiveQuery[T]":
        self._queue = await self._feed.subscribe(self.name)
        await self.refresh()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._queue is not None:
            await self._feed.unsubscribe(self.name, self._queue)
            self._queue = None

    async def _run_fetch(self) -> tuple[bool, Optional[T]]:
        try:
            result = await self._fetch()
        except StoreUnavailableError as exc:
            logger.info("Live query %s is offline; keeping last known value", self.name)
            self._report(exc)
            return False, None
        self._cache.remember(self.name, result)
        return True, result

    async def refresh(self) -> T:
        """One-shot fetch. Does not displace a value that was already pushed."""
        ok, result = await self._run_fetch()
        if ok:
            self._fetched = result
            self._has_fetched = True
        return self.value

    async def next_change(self) -> T:
        """Wait for the next notification and return the merged value after re-reading."""
        if self._queue is None:
            raise RuntimeError("LiveQuery is not subscribed; use it as an async context manager")
        await self._queue.get()
        # Coalesce notifications that piled up while we were waiting.
        while not self._queue.empty():
            self._queue.get_nowait()
        ok, result = await self._run_fetch()
        if ok:
            self._pushed = result
            self._has_pushed = True
        return self.value

    async def __aiter__(self) -> AsyncIterator[T]:
        yield self.value
        while self._queue is not None:
            yield await self.next_change()

    def _report(self, exc: Exception) -> None:
        if self._on_error is None:
            return
        self._on_error(exc)
