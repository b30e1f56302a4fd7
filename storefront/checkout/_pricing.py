"""
Checkout pricing — pure.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.config import Settings
from storefront.coupon import CouponEvaluation, NO_COUPON
from storefront.domain import CartSnapshot, Coupon


def shipping_for(subtotal: int, settings: Settings) -> int:
    """Free strictly above the threshold, flat fee otherwise."""
    if subtotal > settings.free_shipping_threshold:
        return 0
    return settings.shipping_fee


@dataclass(frozen=True, slots=True)
class Quote:
    """
    Checkout summary.

    total == subtotal + shipping - discount, never negative.
    """

    subtotal: int
    discount: int
    shipping: int
    total: int
    item_count: int = 0
    coupon: Coupon | None = None


def compute_quote(
    cart: CartSnapshot,
    settings: Settings,
    evaluation: CouponEvaluation = NO_COUPON,
) -> Quote:
    subtotal = cart.subtotal
    discount = min(evaluation.discount, subtotal) if evaluation.valid else 0
    shipping = shipping_for(subtotal, settings)
    return Quote(
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        total=max(0, subtotal + shipping - discount),
        item_count=cart.item_count,
        coupon=evaluation.coupon if evaluation.valid else None,
    )


__all__ = ("shipping_for", "Quote", "compute_quote")
