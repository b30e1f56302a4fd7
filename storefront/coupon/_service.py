"""
Coupon service — lookup by code and evaluation against the clock.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from kungfu import LazyCoroResult
from combinators import lift as L
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.coupon._evaluate import CouponEvaluation, evaluate, normalize_code
from storefront.db import CouponTable, to_coupon, utcnow
from storefront.domain import Coupon, Role
from storefront.errors import StorefrontError, ValidationError, on_store_error
from storefront.identity import User, require_role

log = logging.getLogger("storefront.coupon")


class CouponService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        currency: str = "INR",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session_factory
        self._currency = currency
        self._clock = clock

    def lookup(self, code: str) -> LazyCoroResult[Coupon | None, StorefrontError]:
        """Active coupon for a code, matched case-insensitively."""
        normalized = normalize_code(code)

        async def fetch() -> Coupon | None:
            async with self._session() as session:
                row = (
                    await session.execute(
                        select(CouponTable).where(
                            CouponTable.code == normalized,
                            CouponTable.is_active.is_(True),
                        )
                    )
                ).scalar_one_or_none()
                return to_coupon(row) if row is not None else None

        return L.catching_async(fetch, on_error=on_store_error)

    def evaluate(
        self, code: str, subtotal: int
    ) -> LazyCoroResult[CouponEvaluation, StorefrontError]:
        """
        Evaluate a code for the checkout summary.

        An unusable coupon is an Ok evaluation with valid=False and the
        reason in .error; only store failures are Error.
        """
        return self.lookup(code).map(
            lambda coupon: evaluate(coupon, subtotal, self._clock(), self._currency)
        )

    def create(self, user: User | None, coupon: Coupon) -> LazyCoroResult[Coupon, StorefrontError]:
        """Admin: add a coupon. The stored code is normalized."""
        async def insert() -> Coupon:
            row = CouponTable(
                code=normalize_code(coupon.code),
                description=coupon.description,
                discount_type=coupon.discount_type.value,
                discount_value=coupon.discount_value,
                min_order_amount=coupon.min_order_amount,
                max_discount_amount=coupon.max_discount_amount,
                usage_limit=coupon.usage_limit,
                used_count=coupon.used_count,
                is_active=coupon.is_active,
                starts_at=coupon.starts_at,
                expires_at=coupon.expires_at,
            )
            async with self._session() as session, session.begin():
                session.add(row)
            log.info("coupon %s created", row.code)
            return to_coupon(row)

        def checked(_: User) -> LazyCoroResult[Coupon, StorefrontError]:
            if coupon.discount_value <= 0:
                return L.fail(ValidationError("Discount value must be positive", ("discount_value",)))
            return L.catching_async(insert, on_error=on_store_error)

        return L.from_result(require_role(user, (Role.ADMIN,), "manage coupons")).then(checked)


__all__ = ("CouponService",)
