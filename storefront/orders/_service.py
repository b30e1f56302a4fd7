"""
Order service — buyer views and status changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from kungfu import LazyCoroResult, Ok, Error
from combinators import lift as L
from sqlalchemy import ColumnElement, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.cache import View, Views, order_key, orders_key
from storefront.db import OrderItemTable, OrderTable, ProductTable, to_order, utcnow
from storefront.domain import Order, OrderStatus, PaymentStatus, Role
from storefront.errors import (
    IllegalStatusTransition,
    NotFound,
    StorefrontError,
    on_store_error,
)
from storefront.feed import ChangeEvent, ChangeFeed, ChangeKind
from storefront.identity import User, require_role, require_user
from storefront.inflight import InFlightGuard
from storefront.notify import Notifier, announce, success
from storefront.orders._machine import check_transition, payment_status_for

log = logging.getLogger("storefront.orders")


@dataclass(frozen=True, slots=True)
class Tracking:
    number: str | None = None
    url: str | None = None


def _sells_in(seller_id: UUID) -> ColumnElement[bool]:
    """Orders holding at least one of the seller's products."""
    return OrderTable.id.in_(
        select(OrderItemTable.order_id)
        .join(ProductTable, OrderItemTable.product_id == ProductTable.id)
        .where(ProductTable.seller_id == seller_id)
    )


def _scope(u: User) -> tuple[ColumnElement[bool], ...]:
    match u.role:
        case Role.CUSTOMER:
            return (OrderTable.user_id == u.id,)
        case Role.SELLER:
            return (_sells_in(u.id),)
        case Role.ADMIN:
            return ()


def status_event(order: Order, previous: OrderStatus) -> ChangeEvent:
    return ChangeEvent(
        table="orders",
        kind=ChangeKind.UPDATE,
        new={
            "id": order.id,
            "user_id": order.user_id,
            "order_number": order.order_number,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "tracking_number": order.tracking_number,
        },
        old={"status": previous.value},
    )


class OrderService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        views: Views,
        feed: ChangeFeed,
        notifier: Notifier,
        *,
        guard: InFlightGuard | None = None,
    ) -> None:
        self._session = session_factory
        self._views = views
        self._feed = feed
        self._notifier = notifier
        self._guard = guard if guard is not None else InFlightGuard()
        self._orders = views.executor(orders_key, self._fetch_orders)
        self._order = views.executor(order_key, self._fetch_order)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    def _fetch_orders(self, user_id: UUID) -> LazyCoroResult[tuple[Order, ...], StorefrontError]:
        async def fetch() -> tuple[Order, ...]:
            async with self._session() as session:
                rows = (
                    await session.execute(
                        select(OrderTable)
                        .where(OrderTable.user_id == user_id)
                        .order_by(OrderTable.created_at.desc(), OrderTable.id)
                    )
                ).scalars().all()
                return tuple(to_order(r) for r in rows)

        return L.catching_async(fetch, on_error=on_store_error)

    def _fetch_order(self, ids: tuple[UUID, UUID]) -> LazyCoroResult[Order, StorefrontError]:
        user_id, order_id = ids

        async def fetch() -> Order:
            async with self._session() as session:
                row = await session.get(OrderTable, order_id)
                if row is None or row.user_id != user_id:
                    raise NotFound("Order", order_id)
                return to_order(row)

        return L.catching_async(fetch, on_error=on_store_error)

    def list_orders(self, user: User | None) -> LazyCoroResult[tuple[Order, ...], StorefrontError]:
        """The buyer's own orders, newest first."""
        return L.from_result(require_user(user)).then(lambda u: self._orders.read(u.id))

    def get_order(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        return L.from_result(require_user(user)).then(lambda u: self._order.read((u.id, order_id)))

    def list_all_orders(
        self,
        user: User | None,
        status: OrderStatus | None = None,
    ) -> LazyCoroResult[tuple[Order, ...], StorefrontError]:
        """Back-office list. Sellers see orders containing their products."""

        async def fetch(u: User) -> tuple[Order, ...]:
            stmt = select(OrderTable).where(*_scope(u)).order_by(
                OrderTable.created_at.desc(), OrderTable.id
            )
            if status is not None:
                stmt = stmt.where(OrderTable.status == status.value)
            async with self._session() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return tuple(to_order(r) for r in rows)

        return L.from_result(require_role(user, (Role.SELLER, Role.ADMIN), "view all orders")).then(
            lambda u: L.catching_async(lambda: fetch(u), on_error=on_store_error)
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Status Changes
    # ═══════════════════════════════════════════════════════════════════════════

    async def _apply(
        self,
        u: User,
        order_id: UUID,
        target: OrderStatus,
        tracking: Tracking | None,
    ) -> Order:
        """
        Validate against the transition table, then compare-and-set.

        The UPDATE only matches while the order still has the status read
        at the start, so a concurrent change turns into
        IllegalStatusTransition instead of a lost update.
        """
        async with self._session() as session, session.begin():
            seen = (
                await session.execute(
                    select(OrderTable.status, OrderTable.payment_status).where(
                        OrderTable.id == order_id, *_scope(u)
                    )
                )
            ).one_or_none()
            if seen is None:
                raise NotFound("Order", order_id)
            current = OrderStatus(seen.status)
            match check_transition(u.role, current, target):
                case Error(_):
                    raise IllegalStatusTransition(current, target, u.role, order_id)
                case Ok(_):
                    pass

            values: dict[str, Any] = {
                "status": target.value,
                "payment_status": payment_status_for(target, PaymentStatus(seen.payment_status)).value,
                "updated_at": utcnow(),
            }
            if target is OrderStatus.SHIPPED and tracking is not None:
                values["tracking_number"] = tracking.number
                values["tracking_url"] = tracking.url

            result = await session.execute(
                update(OrderTable)
                .where(OrderTable.id == order_id, OrderTable.status == current.value, *_scope(u))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                now = (
                    await session.execute(select(OrderTable.status).where(OrderTable.id == order_id))
                ).scalar_one_or_none()
                if now is None:
                    raise NotFound("Order", order_id)
                raise IllegalStatusTransition(OrderStatus(now), target, u.role, order_id)

            row = (
                await session.execute(
                    select(OrderTable)
                    .where(OrderTable.id == order_id)
                    .execution_options(populate_existing=True)
                )
            ).scalar_one()
            order = to_order(row)

        await self._views.invalidate(order.user_id, View.ORDERS, View.ORDER)
        self._feed.publish(status_event(order, current))
        log.info(
            "order %s %s -> %s by %s",
            order.order_number, current.value, target.value, u.role.value,
        )
        return order

    def transition(
        self,
        user: User | None,
        order_id: UUID,
        target: OrderStatus,
        tracking: Tracking | None = None,
    ) -> LazyCoroResult[Order, StorefrontError]:
        """
        Move an order to target on behalf of user.

        Example:
            await orders.transition(seller, order.id, OrderStatus.SHIPPED, Tracking("AWB123"))

        A second change of the same order while one is pending fails with
        DuplicateSubmission.
        """

        def guarded(u: User) -> LazyCoroResult[Order, StorefrontError]:
            return self._guard.run(
                f"order:{order_id}",
                L.catching_async(lambda: self._apply(u, order_id, target, tracking), on_error=on_store_error),
            )

        return announce(
            L.from_result(require_user(user)).then(guarded),
            self._notifier,
            on_ok=lambda o: success("Order status updated", f"Order {o.order_number} is now {o.status.value}."),
            error_title="Failed to update order",
        )

    def cancel(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        """Buyer cancel; only a pending order of one's own."""
        return self.transition(user, order_id, OrderStatus.CANCELLED)

    def accept(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        return self.transition(user, order_id, OrderStatus.CONFIRMED)

    def reject(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        return self.transition(user, order_id, OrderStatus.CANCELLED)

    def start_processing(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        return self.transition(user, order_id, OrderStatus.PROCESSING)

    def ship(
        self,
        user: User | None,
        order_id: UUID,
        tracking: Tracking | None = None,
    ) -> LazyCoroResult[Order, StorefrontError]:
        return self.transition(user, order_id, OrderStatus.SHIPPED, tracking)

    def deliver(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        return self.transition(user, order_id, OrderStatus.DELIVERED)

    def refund(self, user: User | None, order_id: UUID) -> LazyCoroResult[Order, StorefrontError]:
        return self.transition(user, order_id, OrderStatus.REFUNDED)


__all__ = ("Tracking", "OrderService", "status_event")
