"""Tests for checkout pricing and order numbers."""

import re
import uuid
from itertools import permutations
from datetime import datetime, UTC
from decimal import Decimal

from storefront.checkout import ALPHABET, compute_quote, generate_order_number, number_factory, shipping_for
from storefront.config import Settings
from storefront.coupon import NO_COUPON, evaluate
from storefront.domain import CartSnapshot, Coupon, DiscountType, PricedLine

NUMBER = re.compile(r"^ORD-\d{8}-[A-Z2-7]{6}$")


def cart_of(*prices_and_qty):
    lines = tuple(
        PricedLine(
            line_id=uuid.uuid4(),
            product_id=uuid.uuid4(),
            variant_id=None,
            product_name=f"item {i}",
            variant_name=None,
            unit_price=price,
            quantity=qty,
        )
        for i, (price, qty) in enumerate(prices_and_qty)
    )
    return CartSnapshot(user_id=uuid.uuid4(), lines=lines)


class TestShipping:
    def test_fee_below_threshold(self):
        assert shipping_for(45000, Settings()) == 5000

    def test_fee_at_threshold(self):
        assert shipping_for(50000, Settings()) == 5000

    def test_free_above_threshold(self):
        assert shipping_for(50001, Settings()) == 0

    def test_configurable(self):
        settings = Settings(free_shipping_threshold=1000, shipping_fee=99)
        assert shipping_for(500, settings) == 99
        assert shipping_for(1001, settings) == 0


class TestComputeQuote:
    def test_without_coupon(self):
        quote = compute_quote(cart_of((45000, 1)), Settings())
        assert (quote.subtotal, quote.discount, quote.shipping, quote.total) == (45000, 0, 5000, 50000)
        assert quote.coupon is None
        assert quote.item_count == 1

    def test_with_percentage_coupon(self):
        coupon = Coupon(code="SAVE10", discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("10"))
        cart = cart_of((30000, 2))
        quote = compute_quote(cart, Settings(), evaluate(coupon, cart.subtotal, datetime.now(UTC)))
        assert (quote.subtotal, quote.discount, quote.shipping, quote.total) == (60000, 6000, 0, 54000)
        assert quote.coupon.code == "SAVE10"

    def test_total_never_negative(self):
        coupon = Coupon(code="BIG", discount_type=DiscountType.FIXED, discount_value=Decimal("999999"))
        cart = cart_of((1000, 1))
        quote = compute_quote(cart, Settings(shipping_fee=0), evaluate(coupon, cart.subtotal, datetime.now(UTC)))
        assert quote.discount == 1000
        assert quote.total == 0

    def test_invalid_evaluation_gives_no_discount(self):
        quote = compute_quote(cart_of((1000, 3)), Settings(), NO_COUPON)
        assert quote.discount == 0
        assert quote.total == 3000 + 5000

    def test_line_order_does_not_change_subtotal(self):
        cart = cart_of((45000, 1), (1500, 4), (2000, 2))
        totals = {
            (quote.subtotal, quote.shipping, quote.total)
            for quote in (
                compute_quote(CartSnapshot(user_id=cart.user_id, lines=lines), Settings())
                for lines in permutations(cart.lines)
            )
        }
        assert totals == {(55000, 0, 55000)}


class TestOrderNumbers:
    def test_format(self):
        number = generate_order_number("ORD", datetime(2026, 5, 4, tzinfo=UTC))
        assert NUMBER.match(number)
        assert number.startswith("ORD-20260504-")

    def test_suffix_alphabet(self):
        suffix = generate_order_number().rsplit("-", 1)[1]
        assert set(suffix) <= set(ALPHABET)

    def test_fresh_each_call(self):
        numbers = number_factory("SHOP")
        drawn = {numbers() for _ in range(50)}
        assert len(drawn) > 1
        assert all(n.startswith("SHOP-") for n in drawn)
