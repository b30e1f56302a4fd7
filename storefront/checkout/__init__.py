"""
Checkout — pricing and order placement.

    from storefront import checkout as CO

    quote = await service.quote(user, coupon_code="SAVE10")
    order = await service.place_order(user, address, coupon_code="SAVE10")

Totals:
    shipping = 0 if subtotal > free_shipping_threshold else shipping_fee
    total    = subtotal + shipping - discount
"""

from __future__ import annotations

from storefront.checkout._pricing import shipping_for, Quote, compute_quote
from storefront.checkout._numbers import (
    ALPHABET,
    NumberFactory,
    generate_order_number,
    number_factory,
)
from storefront.checkout._store import OrderDraft, OrderWriter
from storefront.checkout._service import CheckoutService, order_event

__all__ = (
    # Pricing
    "shipping_for",
    "Quote",
    "compute_quote",
    # Numbers
    "ALPHABET",
    "NumberFactory",
    "generate_order_number",
    "number_factory",
    # Store
    "OrderDraft",
    "OrderWriter",
    # Service
    "CheckoutService",
    "order_event",
)
