"""
Order writer — the placement transaction and its compensation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from uuid import UUID

from kungfu import LazyCoroResult
from combinators import lift as L
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.checkout._numbers import NumberFactory
from storefront.checkout._pricing import Quote
from storefront.db import (
    CouponTable,
    OrderItemTable,
    OrderTable,
    ProductTable,
    VariantTable,
    to_order,
)
from storefront.domain import (
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PricedLine,
    ShippingAddress,
)
from storefront.errors import (
    CouponError,
    CouponErrorKind,
    PersistenceFailure,
    PersistenceFailureKind,
    StorefrontError,
    on_store_error,
)

log = logging.getLogger("storefront.checkout")


@dataclass(frozen=True, slots=True)
class OrderDraft:
    """Everything placement decided before touching the store."""

    user_id: UUID
    lines: tuple[PricedLine, ...]
    quote: Quote
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.COD
    notes: str | None = None


async def _take_stock(session: AsyncSession, line: PricedLine) -> None:
    """Decrement stock only while enough is left."""
    if line.variant_id is not None:
        stmt = (
            update(VariantTable)
            .where(VariantTable.id == line.variant_id, VariantTable.stock_quantity >= line.quantity)
            .values(stock_quantity=VariantTable.stock_quantity - line.quantity)
        )
    else:
        stmt = (
            update(ProductTable)
            .where(ProductTable.id == line.product_id, ProductTable.stock_quantity >= line.quantity)
            .values(stock_quantity=ProductTable.stock_quantity - line.quantity)
        )
    result = await session.execute(stmt)
    if result.rowcount == 0:
        name = line.product_name if line.variant_name is None else f"{line.product_name} ({line.variant_name})"
        raise PersistenceFailure(PersistenceFailureKind.CONFLICT, f"Not enough stock for {name}")


async def _redeem(session: AsyncSession, code: str) -> None:
    """Count one use, unless the limit was reached meanwhile."""
    result = await session.execute(
        update(CouponTable)
        .where(
            CouponTable.code == code,
            CouponTable.is_active.is_(True),
            (CouponTable.usage_limit.is_(None)) | (CouponTable.used_count < CouponTable.usage_limit),
        )
        .values(used_count=CouponTable.used_count + 1)
    )
    if result.rowcount == 0:
        raise CouponError(CouponErrorKind.USAGE_LIMIT_REACHED, "Coupon usage limit reached")


class OrderWriter:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    def create(
        self,
        draft: OrderDraft,
        numbers: NumberFactory,
    ) -> LazyCoroResult[Order, StorefrontError]:
        """
        Insert the order with its items, take stock and redeem the coupon.

        One transaction: either all of it commits or nothing is visible.
        Each run draws a fresh order number, so retrying after a
        DUPLICATE failure tries a new one. A run cancelled by a timeout
        leaves nothing behind, even when the cancellation lands mid-commit.
        """

        async def write() -> Order:
            quote = draft.quote
            row = OrderTable(
                order_number=numbers(),
                user_id=draft.user_id,
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                payment_method=draft.payment_method.value,
                subtotal=quote.subtotal,
                discount_amount=quote.discount,
                shipping_amount=quote.shipping,
                total_amount=quote.total,
                coupon_code=quote.coupon.code if quote.coupon is not None else None,
                shipping_address=draft.shipping_address.model_dump(),
                notes=draft.notes,
                items=[
                    OrderItemTable(
                        product_id=line.product_id,
                        variant_id=line.variant_id,
                        product_name=line.product_name,
                        variant_name=line.variant_name,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        total_price=line.line_total,
                    )
                    for line in draft.lines
                ],
            )
            async with self._session() as session:
                session.add(row)
                await session.flush()
                for line in draft.lines:
                    await _take_stock(session, line)
                if quote.coupon is not None:
                    await _redeem(session, quote.coupon.code)
                await self._commit(session, row)
            log.info("order %s created for %s", row.order_number, draft.user_id)
            return to_order(row)

        return L.catching_async(write, on_error=on_store_error)

    async def _commit(self, session: AsyncSession, row: OrderTable) -> None:
        """
        Commit without letting cancellation split it.

        The driver finishes a COMMIT it has started even if the awaiting
        task is cancelled, so the commit runs as its own task. A caller
        cancelled meanwhile waits for it, voids the order if it landed,
        then sees the cancellation.
        """
        commit = asyncio.ensure_future(session.commit())
        try:
            await asyncio.shield(commit)
        except asyncio.CancelledError:
            await asyncio.wait([commit])
            if not commit.cancelled() and commit.exception() is None:
                log.warning("order %s committed after its caller gave up", row.order_number)
                await self.void(to_order(row))
            raise

    async def void(self, order: Order) -> None:
        """Compensate create(): delete the order, give back stock and coupon use."""
        async with self._session() as session, session.begin():
            row = await session.get(OrderTable, order.id)
            if row is not None:
                await session.delete(row)
            for item in order.items:
                if item.variant_id is not None:
                    await session.execute(
                        update(VariantTable)
                        .where(VariantTable.id == item.variant_id)
                        .values(stock_quantity=VariantTable.stock_quantity + item.quantity)
                    )
                elif item.product_id is not None:
                    await session.execute(
                        update(ProductTable)
                        .where(ProductTable.id == item.product_id)
                        .values(stock_quantity=ProductTable.stock_quantity + item.quantity)
                    )
            if order.coupon_code is not None:
                await session.execute(
                    update(CouponTable)
                    .where(CouponTable.code == order.coupon_code, CouponTable.used_count > 0)
                    .values(used_count=CouponTable.used_count - 1)
                )
        log.warning("order %s voided", order.order_number)


__all__ = ("OrderDraft", "OrderWriter")
