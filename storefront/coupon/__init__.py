"""
Coupon — discount validation.

    from storefront import coupon as K

    ev = K.evaluate(coupon, subtotal=60000, now=now)
    ev.valid, ev.discount, ev.error
"""

from __future__ import annotations

from storefront.coupon._evaluate import (
    CouponEvaluation,
    NO_COUPON,
    normalize_code,
    discount_for,
    evaluate,
)
from storefront.coupon._service import CouponService

__all__ = (
    "CouponEvaluation",
    "NO_COUPON",
    "normalize_code",
    "discount_for",
    "evaluate",
    "CouponService",
)
