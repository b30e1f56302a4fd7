"""
Wishlist service — favourited products with toggle semantics.
"""

from __future__ import annotations

import logging
from uuid import UUID

from kungfu import LazyCoroResult
from combinators import lift as L
from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.cache import View, Views, wishlist_key
from storefront.db import ProductTable, WishlistTable, to_wishlist_entry
from storefront.domain import WishlistEntry
from storefront.errors import NotFound, StorefrontError, on_store_error
from storefront.identity import User, require_user
from storefront.notify import Notifier, announce, success

log = logging.getLogger("storefront.wishlist")

ADDED = success("Added to wishlist", "Item has been added to your wishlist.")
REMOVED = success("Removed", "Item has been removed from your wishlist.")


class WishlistService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        views: Views,
        notifier: Notifier,
    ) -> None:
        self._session = session_factory
        self._views = views
        self._notifier = notifier
        self._cache = views.executor(wishlist_key, self._fetch)

    def _fetch(self, user_id: UUID) -> LazyCoroResult[tuple[WishlistEntry, ...], StorefrontError]:
        async def fetch() -> tuple[WishlistEntry, ...]:
            async with self._session() as session:
                rows = (
                    await session.execute(
                        select(WishlistTable)
                        .where(WishlistTable.user_id == user_id)
                        .order_by(WishlistTable.created_at.desc())
                    )
                ).scalars().all()
                return tuple(to_wishlist_entry(r) for r in rows)

        return L.catching_async(fetch, on_error=on_store_error)

    def items(self, user: User | None) -> LazyCoroResult[tuple[WishlistEntry, ...], StorefrontError]:
        return L.from_result(require_user(user)).then(lambda u: self._cache.read(u.id))

    def contains(self, user: User | None, product_id: UUID) -> LazyCoroResult[bool, StorefrontError]:
        return self.items(user).map(
            lambda entries: any(e.product_id == product_id for e in entries)
        )

    def add(self, user: User | None, product_id: UUID) -> LazyCoroResult[bool, StorefrontError]:
        """Add a product; adding one already present changes nothing."""
        return announce(self._set(user, product_id, present=True), self._notifier, on_ok=lambda _: ADDED)

    def remove(self, user: User | None, product_id: UUID) -> LazyCoroResult[bool, StorefrontError]:
        return announce(self._set(user, product_id, present=False), self._notifier, on_ok=lambda _: REMOVED)

    def toggle(self, user: User | None, product_id: UUID) -> LazyCoroResult[bool, StorefrontError]:
        """Flip membership. Ok(True) when the product is now in the wishlist."""

        def flip(present: bool) -> LazyCoroResult[bool, StorefrontError]:
            if present:
                return self.remove(user, product_id).map(lambda _: False)
            return self.add(user, product_id).map(lambda _: True)

        return self.contains(user, product_id).then(flip)

    def _set(
        self,
        user: User | None,
        product_id: UUID,
        *,
        present: bool,
    ) -> LazyCoroResult[bool, StorefrontError]:
        """Make membership match present. Ok(True) when a row changed."""

        async def write(u: User) -> bool:
            async with self._session() as session, session.begin():
                if present:
                    product = await session.get(ProductTable, product_id)
                    if product is None:
                        raise NotFound("Product", product_id)
                    insert = pg_insert if session.bind.dialect.name == "postgresql" else sqlite_insert
                    result = await session.execute(
                        insert(WishlistTable)
                        .values(user_id=u.id, product_id=product_id)
                        .on_conflict_do_nothing(index_elements=["user_id", "product_id"])
                    )
                else:
                    result = await session.execute(
                        delete(WishlistTable).where(
                            WishlistTable.user_id == u.id,
                            WishlistTable.product_id == product_id,
                        )
                    )
            await self._views.invalidate(u.id, View.WISHLIST)
            return result.rowcount > 0

        return L.from_result(require_user(user)).then(
            lambda u: L.catching_async(lambda: write(u), on_error=on_store_error)
        )


__all__ = ("WishlistService",)
