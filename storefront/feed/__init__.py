"""
Feed — row change events and live order tracking.

    from storefront import feed as F

    changes = F.ChangeFeed()
    async with F.OrderWatcher(user.id, changes, views, notifier):
        ...
"""

from __future__ import annotations

from storefront.feed._types import ChangeKind, ChangeEvent
from storefront.feed._feed import Subscription, ChangeFeed
from storefront.feed._watcher import OrderWatcher, STATUS_NOTICES, status_notice

__all__ = (
    "ChangeKind",
    "ChangeEvent",
    "Subscription",
    "ChangeFeed",
    "OrderWatcher",
    "STATUS_NOTICES",
    "status_notice",
)
