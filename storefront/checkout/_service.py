"""
Checkout service — quote and place an order.

    cart → coupon → totals → persist (retried, bounded) → clear cart
         → invalidate views → publish → notify

Persist and clear-cart run as a saga: if the cart cannot be cleared the
created order is voided.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from kungfu import LazyCoroResult, Result, Ok, Error
from combinators import lift as L, flow, RetryPolicy

from storefront import saga as S
from storefront.cache import View, Views
from storefront.cart import CartService
from storefront.checkout._numbers import NumberFactory, number_factory
from storefront.checkout._pricing import Quote, compute_quote
from storefront.checkout._store import OrderDraft, OrderWriter
from storefront.config import Settings
from storefront.coupon import CouponService, NO_COUPON
from storefront.domain import CartSnapshot, Order, PaymentMethod, ShippingAddress
from storefront.errors import (
    EmptyCart,
    PersistenceFailure,
    PersistenceFailureKind,
    StorefrontError,
    ValidationError,
    on_store_error,
    parse_input,
)
from storefront.feed import ChangeEvent, ChangeFeed, ChangeKind
from storefront.identity import User, require_user
from storefront.inflight import InFlightGuard
from storefront.notify import Notifier, announce, success

log = logging.getLogger("storefront.checkout")


def _collided(e: StorefrontError) -> bool:
    return isinstance(e, PersistenceFailure) and e.kind is PersistenceFailureKind.DUPLICATE


def _payment_method(raw: str | PaymentMethod) -> Result[PaymentMethod, ValidationError]:
    if isinstance(raw, PaymentMethod):
        return Ok(raw)
    try:
        return Ok(PaymentMethod(raw.strip().lower()))
    except ValueError:
        return Error(ValidationError(f"Unsupported payment method: {raw}", ("payment_method",)))


def order_event(order: Order) -> ChangeEvent:
    """INSERT event for a freshly placed order."""
    return ChangeEvent(
        table="orders",
        kind=ChangeKind.INSERT,
        new={
            "id": order.id,
            "user_id": order.user_id,
            "order_number": order.order_number,
            "status": order.status.value,
            "total_amount": order.total_amount,
        },
    )


class CheckoutService:
    def __init__(
        self,
        cart: CartService,
        coupons: CouponService,
        writer: OrderWriter,
        views: Views,
        feed: ChangeFeed,
        notifier: Notifier,
        settings: Settings,
        *,
        guard: InFlightGuard | None = None,
        numbers: NumberFactory | None = None,
    ) -> None:
        self._cart = cart
        self._coupons = coupons
        self._writer = writer
        self._views = views
        self._feed = feed
        self._notifier = notifier
        self._settings = settings
        self._guard = guard if guard is not None else InFlightGuard()
        self._numbers = numbers if numbers is not None else number_factory(settings.order_number_prefix)

    # ═══════════════════════════════════════════════════════════════════════════
    # Pricing
    # ═══════════════════════════════════════════════════════════════════════════

    def _price(
        self, cart: CartSnapshot, coupon_code: str | None
    ) -> LazyCoroResult[Quote, StorefrontError]:
        """A supplied code that does not apply fails; it is never dropped silently."""
        if cart.is_empty:
            return L.fail(EmptyCart())
        if coupon_code is None or not coupon_code.strip():
            return L.pure(compute_quote(cart, self._settings, NO_COUPON))
        return self._coupons.evaluate(coupon_code, cart.subtotal).then(
            lambda ev: L.from_result(ev.as_result()).map(
                lambda valid: compute_quote(cart, self._settings, valid)
            )
        )

    def quote(
        self, user: User | None, coupon_code: str | None = None
    ) -> LazyCoroResult[Quote, StorefrontError]:
        """Checkout summary for the current cart; nothing is persisted."""
        return L.from_result(require_user(user)).then(
            lambda u: self._cart.snapshot(u.id).then(lambda cart: self._price(cart, coupon_code))
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Placement
    # ═══════════════════════════════════════════════════════════════════════════

    def _persist(self, draft: OrderDraft) -> LazyCoroResult[Order, StorefrontError]:
        s = self._settings
        return (
            flow(self._writer.create(draft, self._numbers))
            .retry(policy=RetryPolicy.fixed(times=s.order_number_attempts, retry_on=_collided))
            .timeout(seconds=s.order_timeout_seconds)
            .compile()
            .map_err(on_store_error)
        )

    async def _commit(self, draft: OrderDraft) -> Result[Order, StorefrontError]:
        saga = S.step(
            self._persist(draft),
            compensate=self._writer.void,
            name="create_order",
        ).then(
            lambda order: S.step(
                self._cart.clear(draft.user_id).map(lambda _: order),
                name="clear_cart",
            )
        )
        match await S.run(saga):
            case Ok(done):
                return Ok(done.value)
            case Error(failed):
                if not failed.rollback_complete:
                    log.error("rollback incomplete after %s", failed.error)
                return Error(failed.error)

    def place_order(
        self,
        user: User | None,
        shipping_address: ShippingAddress | Mapping[str, Any],
        payment_method: str | PaymentMethod = "cod",
        coupon_code: str | None = None,
        notes: str | None = None,
    ) -> LazyCoroResult[Order, StorefrontError]:
        """
        Place an order from the user's cart.

        Example:
            match await checkout.place_order(user, address, coupon_code="SAVE10"):
                case Ok(order):
                    order.order_number
                case Error(e):
                    e.message

        Failure before the order is committed leaves the cart and the
        store untouched. A second call for the same user while one is
        pending fails with DuplicateSubmission.
        """

        async def execute(u: User) -> Result[Order, StorefrontError]:
            match parse_input(ShippingAddress, shipping_address):
                case Error(e):
                    return Error(e)
                case Ok(address):
                    pass
            match _payment_method(payment_method):
                case Error(e):
                    return Error(e)
                case Ok(method):
                    pass
            match await self._cart.snapshot(u.id):
                case Error(e):
                    return Error(e)
                case Ok(cart):
                    pass
            match await self._price(cart, coupon_code):
                case Error(e):
                    return Error(e)
                case Ok(quote):
                    pass

            draft = OrderDraft(
                user_id=u.id,
                lines=cart.lines,
                quote=quote,
                shipping_address=address,
                payment_method=method,
                notes=notes.strip() if notes and notes.strip() else None,
            )
            match await self._commit(draft):
                case Error(e):
                    return Error(e)
                case Ok(order):
                    await self._views.invalidate(u.id, View.CART, View.ORDERS)
                    self._feed.publish(order_event(order))
                    return Ok(order)

        def guarded(u: User) -> LazyCoroResult[Order, StorefrontError]:
            return self._guard.run(f"place:{u.id}", LazyCoroResult(lambda: execute(u)))

        return announce(
            L.from_result(require_user(user)).then(guarded),
            self._notifier,
            on_ok=lambda order: success(
                "Order placed!",
                f"Your order {order.order_number} has been placed successfully.",
            ),
        )


__all__ = ("CheckoutService", "order_event")
