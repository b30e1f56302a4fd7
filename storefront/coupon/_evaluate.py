"""
Coupon evaluation — pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from kungfu import Result, Ok, Error

from storefront.domain import Coupon, DiscountType, format_money
from storefront.errors import CouponError, CouponErrorKind


@dataclass(frozen=True, slots=True)
class CouponEvaluation:
    valid: bool
    discount: int
    coupon: Coupon | None = None
    error: CouponError | None = None

    def as_result(self) -> Result[CouponEvaluation, CouponError]:
        if self.error is not None:
            return Error(self.error)
        return Ok(self)


NO_COUPON = CouponEvaluation(valid=False, discount=0)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def discount_for(coupon: Coupon, subtotal: int) -> int:
    """Discount in minor units; never more than the subtotal."""
    match coupon.discount_type:
        case DiscountType.PERCENTAGE:
            raw = (Decimal(subtotal) * coupon.discount_value / 100).quantize(
                Decimal(1), rounding=ROUND_HALF_UP
            )
            discount = int(raw)
            if coupon.max_discount_amount is not None:
                discount = min(discount, coupon.max_discount_amount)
        case DiscountType.FIXED:
            discount = int(coupon.discount_value)
    return max(0, min(discount, subtotal))


def _reject(kind: CouponErrorKind, detail: str) -> CouponEvaluation:
    return CouponEvaluation(valid=False, discount=0, error=CouponError(kind, detail))


def evaluate(
    coupon: Coupon | None,
    subtotal: int,
    now: datetime,
    currency: str = "INR",
) -> CouponEvaluation:
    """
    Check a coupon against a subtotal at a point in time.

    Checks run in a fixed order and the first failure wins: unknown or
    inactive, not started, expired, below minimum, usage limit.
    """
    if coupon is None or not coupon.is_active:
        return _reject(CouponErrorKind.NOT_FOUND, "Invalid coupon code")
    if coupon.starts_at is not None and now < coupon.starts_at:
        return _reject(CouponErrorKind.NOT_YET_ACTIVE, "This coupon is not yet active")
    if coupon.expires_at is not None and now > coupon.expires_at:
        return _reject(CouponErrorKind.EXPIRED, "This coupon has expired")
    if coupon.min_order_amount is not None and subtotal < coupon.min_order_amount:
        return _reject(
            CouponErrorKind.BELOW_MINIMUM,
            f"Minimum order of {format_money(coupon.min_order_amount, currency)} required",
        )
    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        return _reject(CouponErrorKind.USAGE_LIMIT_REACHED, "Coupon usage limit reached")

    return CouponEvaluation(valid=True, discount=discount_for(coupon, subtotal), coupon=coupon)


__all__ = (
    "CouponEvaluation",
    "NO_COUPON",
    "normalize_code",
    "discount_for",
    "evaluate",
)
