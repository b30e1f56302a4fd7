"""
Cart service — per-user lines, live prices.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from kungfu import LazyCoroResult
from combinators import lift as L
from sqlalchemy import Insert, delete, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.cache import View, Views, cart_key
from storefront.db import CartItemTable, ProductTable, VariantTable
from storefront.domain import CartSnapshot, PricedLine
from storefront.errors import NotFound, StorefrontError, ValidationError, on_store_error
from storefront.identity import User, require_user
from storefront.notify import Notifier, announce, success

log = logging.getLogger("storefront.cart")


def price_line(row: CartItemTable) -> PricedLine:
    """Variant price wins over product price when the variant sets one."""
    unit_price = row.product.price
    variant_name = None
    if row.variant is not None:
        variant_name = row.variant.name
        if row.variant.price is not None:
            unit_price = row.variant.price
    return PricedLine(
        line_id=row.id,
        product_id=row.product_id,
        variant_id=row.variant_id,
        product_name=row.product.name,
        variant_name=variant_name,
        unit_price=unit_price,
        quantity=row.quantity,
    )


async def load_snapshot(session: AsyncSession, user_id: UUID) -> CartSnapshot:
    rows = (
        await session.execute(
            select(CartItemTable)
            .where(CartItemTable.user_id == user_id)
            .order_by(CartItemTable.created_at, CartItemTable.id)
        )
    ).scalars().all()
    return CartSnapshot(user_id=user_id, lines=tuple(price_line(r) for r in rows))


def _merge_line(
    session: AsyncSession,
    user_id: UUID,
    product_id: UUID,
    variant_id: UUID | None,
    quantity: int,
) -> Insert:
    """Insert the line, or add to the quantity of the one already there."""
    insert = pg_insert if session.get_bind().dialect.name == "postgresql" else sqlite_insert
    stmt = insert(CartItemTable).values(
        user_id=user_id,
        product_id=product_id,
        variant_id=variant_id,
        quantity=quantity,
    )
    if variant_id is None:
        target, where = ["user_id", "product_id"], text("variant_id IS NULL")
    else:
        target, where = ["user_id", "product_id", "variant_id"], text("variant_id IS NOT NULL")
    return stmt.on_conflict_do_update(
        index_elements=target,
        index_where=where,
        set_={"quantity": CartItemTable.quantity + stmt.excluded.quantity},
    )


class CartService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        views: Views,
        notifier: Notifier,
    ) -> None:
        self._session = session_factory
        self._views = views
        self._notifier = notifier
        self._cache = views.executor(cart_key, self._fetch)

    def _fetch(self, user_id: UUID) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        async def fetch() -> CartSnapshot:
            async with self._session() as session:
                return await load_snapshot(session, user_id)

        return L.catching_async(fetch, on_error=on_store_error)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    def view(self, user: User | None) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        return L.from_result(require_user(user)).then(lambda u: self._cache.read(u.id))

    def snapshot(self, user_id: UUID) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        """Fresh read that bypasses the view cache; checkout prices from this."""
        return self._fetch(user_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════════

    def add(
        self,
        user: User | None,
        product_id: UUID,
        variant_id: UUID | None = None,
        quantity: int = 1,
    ) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        """Add to cart; a repeat add of the same product/variant merges quantities."""

        async def write(u: User) -> None:
            if quantity < 1:
                raise ValidationError("Quantity must be at least 1", ("quantity",))
            async with self._session() as session, session.begin():
                product = await session.get(ProductTable, product_id)
                if product is None or not product.is_active:
                    raise NotFound("Product", product_id)
                if variant_id is not None:
                    variant = await session.get(VariantTable, variant_id)
                    if variant is None or variant.product_id != product_id or not variant.is_active:
                        raise NotFound("Variant", variant_id)

                await session.execute(_merge_line(session, u.id, product_id, variant_id, quantity))

        return announce(
            self._mutate(user, write),
            self._notifier,
            on_ok=lambda _: success("Added to cart", "Item has been added to your cart."),
        )

    def update_quantity(
        self,
        user: User | None,
        line_id: UUID,
        quantity: int,
    ) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        """Set a line's quantity; anything below 1 removes the line."""

        async def write(u: User) -> None:
            async with self._session() as session, session.begin():
                line = await self._own_line(session, u, line_id)
                if quantity < 1:
                    await session.delete(line)
                else:
                    line.quantity = quantity

        return announce(self._mutate(user, write), self._notifier)

    def remove(
        self,
        user: User | None,
        line_id: UUID,
    ) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        async def write(u: User) -> None:
            async with self._session() as session, session.begin():
                await session.delete(await self._own_line(session, u, line_id))

        return announce(
            self._mutate(user, write),
            self._notifier,
            on_ok=lambda _: success("Removed", "Item has been removed from your cart."),
        )

    def clear(self, user_id: UUID) -> LazyCoroResult[int, StorefrontError]:
        """Delete every line of a user's cart. Returns lines removed."""

        async def wipe() -> int:
            async with self._session() as session, session.begin():
                result = await session.execute(
                    delete(CartItemTable).where(CartItemTable.user_id == user_id)
                )
            await self._views.invalidate(user_id, View.CART)
            return result.rowcount

        return L.catching_async(wipe, on_error=on_store_error)

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    async def _own_line(session: AsyncSession, u: User, line_id: UUID) -> CartItemTable:
        line = await session.get(CartItemTable, line_id)
        if line is None or line.user_id != u.id:
            raise NotFound("Cart item", line_id)
        return line

    def _mutate(
        self,
        user: User | None,
        write: Callable[[User], Awaitable[None]],
    ) -> LazyCoroResult[CartSnapshot, StorefrontError]:
        """Run write for the signed-in user, drop the cached view, return the new cart."""

        async def run(u: User) -> CartSnapshot:
            await write(u)
            await self._views.invalidate(u.id, View.CART)
            log.debug("cart changed for %s", u.id)
            async with self._session() as session:
                return await load_snapshot(session, u.id)

        return L.from_result(require_user(user)).then(
            lambda u: L.catching_async(lambda: run(u), on_error=on_store_error)
        )


__all__ = ("CartService", "price_line", "load_snapshot")
