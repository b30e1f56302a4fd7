"""
Cache — tiered view caching with per-user invalidation.

    from storefront import cache as C

    views = C.Views(max_size=1000)
    carts = views.executor(C.cart_key, fetch_cart)
    result = await carts.get(user_id)
    await views.invalidate(user_id, C.View.CART)
"""

from __future__ import annotations

from storefront.cache._types import Tier, LocalTier, CacheResult
from storefront.cache._executor import CacheExecutor, KeyFn
from storefront.cache._views import (
    View,
    Views,
    cart_key,
    orders_key,
    order_key,
    wishlist_key,
)

__all__ = (
    "Tier",
    "LocalTier",
    "CacheResult",
    "CacheExecutor",
    "KeyFn",
    "View",
    "Views",
    "cart_key",
    "orders_key",
    "order_key",
    "wishlist_key",
)
