"""
Order watcher — pushes a buyer's order status changes into their session.
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from storefront.cache import View, Views
from storefront.domain import OrderStatus
from storefront.feed._feed import ChangeFeed, Subscription
from storefront.feed._types import ChangeEvent, ChangeKind
from storefront.notify import Notice, Notifier, success

log = logging.getLogger("storefront.feed")

STATUS_NOTICES: dict[OrderStatus, tuple[str, str]] = {
    OrderStatus.CONFIRMED: ("Order accepted", "Your order {number} has been accepted."),
    OrderStatus.PROCESSING: ("Order is being processed", "Your order {number} is being prepared."),
    OrderStatus.SHIPPED: ("Order shipped", "Your order {number} is on its way."),
    OrderStatus.DELIVERED: ("Order delivered", "Your order {number} has been delivered."),
    OrderStatus.CANCELLED: ("Order cancelled", "Your order {number} has been cancelled."),
    OrderStatus.REFUNDED: ("Order refunded", "Your order {number} has been refunded."),
}


def status_notice(event: ChangeEvent) -> Notice | None:
    if event.kind is not ChangeKind.UPDATE or not event.changed("status"):
        return None
    status = OrderStatus(event.new["status"])
    template = STATUS_NOTICES.get(status)
    if template is None:
        return None
    title, message = template
    return success(title, message.format(number=event.new.get("order_number", "")))


class OrderWatcher:
    """
    One live subscription per buyer session.

    Example:
        async with OrderWatcher(user.id, feed, views, notifier):
            ...  # status changes invalidate views and raise notices
    """

    def __init__(
        self,
        user_id: UUID,
        feed: ChangeFeed,
        views: Views,
        notifier: Notifier,
    ) -> None:
        self.user_id = user_id
        self._feed = feed
        self._views = views
        self._notifier = notifier
        self._subscription: Subscription | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            return
        self._subscription = self._feed.subscribe("orders", user_id=self.user_id)
        self._task = asyncio.create_task(
            self._consume(self._subscription),
            name=f"order-watcher:{self.user_id}",
        )

    async def stop(self) -> None:
        """Close the subscription and wait for the consumer to finish."""
        if self._subscription is not None:
            self._subscription.close()
        if self._task is not None:
            await self._task
        self._subscription = None
        self._task = None

    async def _consume(self, events: Subscription) -> None:
        async for event in events:
            try:
                await self._handle(event)
            except Exception:
                log.exception("order watcher for %s failed on %s", self.user_id, event.new.get("id"))

    async def _handle(self, event: ChangeEvent) -> None:
        await self._views.invalidate(self.user_id, View.ORDERS, View.ORDER)
        notice = status_notice(event)
        if notice is not None:
            self._notifier.notify(notice)
        log.debug("order %s changed for %s", event.new.get("id"), self.user_id)

    async def __aenter__(self) -> OrderWatcher:
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()


__all__ = ("OrderWatcher", "STATUS_NOTICES", "status_notice")
