"""
In-process change feed with cancellable subscriptions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from storefront.feed._types import ChangeEvent

log = logging.getLogger("storefront.feed")


class Subscription:
    """
    Stream of matching events; async iterator and async context manager.

    Example:
        async with feed.subscribe("orders", user_id=user.id) as events:
            async for event in events:
                ...

    close() is idempotent; iteration ends once buffered events drain.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        table: str,
        filters: dict[str, Any],
        buffer: int,
    ) -> None:
        self.table = table
        self.filters = filters
        self._feed = feed
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=buffer)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        return all(event.new.get(k) == v for k, v in self.filters.items())

    def deliver(self, event: ChangeEvent) -> bool:
        if self._closed:
            return False
        if self._queue.full():
            dropped = self._queue.get_nowait()
            log.warning("subscription on %s overflowed, dropped %s event", self.table, dropped.kind.value)
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._detach(self)
        self._queue.shutdown()

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> ChangeEvent:
        try:
            return await self._queue.get()
        except asyncio.QueueShutDown:
            raise StopAsyncIteration from None

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.close()


class ChangeFeed:
    """Fan-out of change events to live subscriptions."""

    def __init__(self, buffer: int = 100) -> None:
        self._buffer = buffer
        self._subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, table: str, **filters: Any) -> Subscription:
        sub = Subscription(self, table, filters, self._buffer)
        self._subscriptions.append(sub)
        log.debug("subscribed to %s %s", table, filters)
        return sub

    def publish(self, event: ChangeEvent) -> int:
        """Deliver to every matching subscription. Returns delivery count."""
        delivered = 0
        for sub in tuple(self._subscriptions):
            if sub.matches(event) and sub.deliver(event):
                delivered += 1
        return delivered

    def _detach(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)


__all__ = ("Subscription", "ChangeFeed")
