"""
Storefront assembly — one object holding every service over a shared
database, view cache, change feed and notifier.

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    shop = await create_storefront(settings)

    await shop.cart.add(user, product_id)
    order = await shop.checkout.place_order(user, address)

    async with shop.watch(user):
        ...

    await shop.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront.cache import Views
from storefront.cart import CartService
from storefront.catalog import CatalogAdmin, CatalogService
from storefront.checkout import CheckoutService, OrderWriter, number_factory
from storefront.config import Settings
from storefront.coupon import CouponService
from storefront.db import create_database
from storefront.feed import ChangeFeed, OrderWatcher
from storefront.identity import User
from storefront.inflight import InFlightGuard
from storefront.notify import LoggingNotifier, Notifier
from storefront.orders import OrderService
from storefront.wishlist import WishlistService

log = logging.getLogger("storefront.app")


@dataclass(slots=True)
class Storefront:
    settings: Settings
    engine: AsyncEngine
    sessions: async_sessionmaker[AsyncSession]
    views: Views
    feed: ChangeFeed
    notifier: Notifier
    catalog: CatalogService
    admin: CatalogAdmin
    cart: CartService
    wishlist: WishlistService
    coupons: CouponService
    checkout: CheckoutService
    orders: OrderService

    def watch(self, user: User) -> OrderWatcher:
        """Live order tracking for one buyer session; use as an async context manager."""
        return OrderWatcher(user.id, self.feed, self.views, self.notifier)

    async def close(self) -> None:
        await self.engine.dispose()
        log.info("storefront closed")


async def create_storefront(
    settings: Settings | None = None,
    notifier: Notifier | None = None,
) -> Storefront:
    settings = settings if settings is not None else Settings()
    notifier = notifier if notifier is not None else LoggingNotifier()

    sessions, engine = await create_database(settings.database_url)
    views = Views(max_size=settings.cache_size)
    feed = ChangeFeed(buffer=settings.feed_buffer)

    cart = CartService(sessions, views, notifier)
    coupons = CouponService(sessions, currency=settings.currency)
    checkout = CheckoutService(
        cart,
        coupons,
        OrderWriter(sessions),
        views,
        feed,
        notifier,
        settings,
        guard=InFlightGuard(),
        numbers=number_factory(settings.order_number_prefix),
    )

    log.info("storefront ready (%s)", settings.currency)
    return Storefront(
        settings=settings,
        engine=engine,
        sessions=sessions,
        views=views,
        feed=feed,
        notifier=notifier,
        catalog=CatalogService(sessions),
        admin=CatalogAdmin(sessions, notifier),
        cart=cart,
        wishlist=WishlistService(sessions, views, notifier),
        coupons=coupons,
        checkout=checkout,
        orders=OrderService(sessions, views, feed, notifier, guard=InFlightGuard()),
    )


__all__ = ("Storefront", "create_storefront")
