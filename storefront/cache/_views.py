"""
Per-user views — one shared tier for cart, orders and wishlist reads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from uuid import UUID

from kungfu import LazyCoroResult

from storefront.cache._executor import CacheExecutor, KeyFn
from storefront.cache._types import LocalTier, Tier

log = logging.getLogger("storefront.cache")


class View(Enum):
    CART = "cart"
    ORDERS = "orders"
    ORDER = "order"
    WISHLIST = "wishlist"


def cart_key(user_id: UUID) -> str:
    return f"cart:{user_id}"


def orders_key(user_id: UUID) -> str:
    return f"orders:{user_id}"


def order_key(ids: tuple[UUID, UUID]) -> str:
    user_id, order_id = ids
    return f"order:{user_id}:{order_id}"


def wishlist_key(user_id: UUID) -> str:
    return f"wishlist:{user_id}"


_PATTERNS: dict[View, str] = {
    View.CART: "cart:{user}",
    View.ORDERS: "orders:{user}",
    View.ORDER: "order:{user}:*",
    View.WISHLIST: "wishlist:{user}",
}


class Views:
    """
    View cache shared by the services of one storefront.

    Example:
        views = Views(max_size=1000)
        cart = views.executor(cart_key, fetch_cart)
        await views.invalidate(user_id, View.CART)
    """

    def __init__(self, max_size: int = 1000, tier: Tier[object] | None = None) -> None:
        self.tier: Tier[object] = tier if tier is not None else LocalTier(max_size=max_size)

    def executor[K, T, E](
        self,
        key: KeyFn[K],
        fetch: Callable[[K], LazyCoroResult[T, E]],
    ) -> CacheExecutor[K, T, E]:
        return CacheExecutor(key, (self.tier,), fetch)  # type: ignore[arg-type]

    async def invalidate(self, user_id: UUID, *views: View) -> int:
        """Drop the given views of one user (all of them when none given)."""
        total = 0
        for view in views or tuple(View):
            total += await self.tier.delete_pattern(_PATTERNS[view].format(user=user_id))
        log.debug("invalidated %d view(s) for %s", total, user_id)
        return total


__all__ = (
    "View",
    "Views",
    "cart_key",
    "orders_key",
    "order_key",
    "wishlist_key",
)
