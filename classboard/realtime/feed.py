from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)


def topic(class_id: str, collection: str, key: str | None = None) -> str:
    """Topic naming: "<class>/<collection>" or "<class>/<collection>/<key>"."""
    if key is None:
        return f"{class_id}/{collection}"
    return f"{class_id}/{collection}/{key}"


def settings_topic(class_id: str) -> str:
    return topic(class_id, "settings")


def fixed_topic(class_id: str) -> str:
    return topic(class_id, "fixed")


def daily_topic(class_id: str, iso_date: str) -> str:
    return topic(class_id, "daily", iso_date)


class ChangeFeed:
    """In-process change notifications. Writers publish topics after commit; each
    subscriber owns a queue that receives the topic names it is interested in."""

    def __init__(self) -> None:
        self._queues: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def subscribe(self, name: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        async with self._lock:
            self._queues[name].add(queue)
        return queue

    async def unsubscribe(self, name: str, queue: asyncio.Queue) -> None:
        async with self._lock:
            queues = self._queues.get(name)
            if not queues:
                return
            queues.discard(queue)
            if not queues:
                self._queues.pop(name, None)

    async def publish(self, *names: str) -> None:
        async with self._lock:
            targets = [(name, list(self._queues.get(name, ()))) for name in set(names)]
        delivered = 0
        for name, queues in targets:
            for queue in queues:
                queue.put_nowait(name)
                delivered += 1
        if delivered:
            logger.debug("Published %s to %d subscriber(s)", sorted(set(names)), delivered)

    def subscriber_count(self, name: str) -> int:
        return len(self._queues.get(name, ()))


class SnapshotCache:
    """Last value successfully read per topic. Reads fall back to it while the store is offline."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def remember(self, name: str, value: Any) -> Any:
        self._values[name] = value
        return value

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def clear(self) -> None:
        self._values.clear()


change_feed = ChangeFeed()
snapshot_cache = SnapshotCache()
