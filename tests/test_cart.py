"""Tests for the cart."""

import asyncio
import uuid

from storefront.errors import NotFound, Unauthenticated, ValidationError


class TestAdd:
    async def test_add_prices_line(self, shop, seeded, customer, notifier):
        cart = (await shop.cart.add(customer, seeded.products["headphones"], quantity=2)).unwrap()
        assert len(cart.lines) == 1
        line = cart.lines[0]
        assert line.product_name == "Headphones"
        assert line.unit_price == 45000
        assert line.line_total == 90000
        assert cart.subtotal == 90000
        assert cart.item_count == 2
        assert notifier.last.title == "Added to cart"
        assert notifier.last.message == "Item has been added to your cart."

    async def test_repeat_add_merges(self, shop, seeded, customer):
        await shop.cart.add(customer, seeded.products["tshirt"])
        cart = (await shop.cart.add(customer, seeded.products["tshirt"], quantity=3)).unwrap()
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 4

    async def test_variant_price_wins(self, shop, seeded, customer):
        cart = (
            await shop.cart.add(customer, seeded.products["tshirt"], seeded.variants["large"])
        ).unwrap()
        assert cart.lines[0].unit_price == 2000
        assert cart.lines[0].variant_name == "Large"

    async def test_variant_and_plain_lines_are_separate(self, shop, seeded, customer):
        tshirt = seeded.products["tshirt"]
        await shop.cart.add(customer, tshirt)
        cart = (await shop.cart.add(customer, tshirt, seeded.variants["large"])).unwrap()
        assert len(cart.lines) == 2
        assert cart.subtotal == 1500 + 2000

    async def test_concurrent_adds_share_one_line(self, shop, seeded, customer):
        tshirt, large = seeded.products["tshirt"], seeded.variants["large"]

        await asyncio.gather(
            shop.cart.add(customer, tshirt),
            shop.cart.add(customer, tshirt, quantity=2),
            shop.cart.add(customer, tshirt, large),
            shop.cart.add(customer, tshirt, large),
        )

        cart = (await shop.cart.snapshot(customer.id)).unwrap()
        assert sorted((line.variant_id is not None, line.quantity) for line in cart.lines) == [
            (False, 3),
            (True, 2),
        ]

    async def test_inactive_product(self, shop, seeded, customer, notifier):
        result = await shop.cart.add(customer, seeded.products["retired"])
        assert isinstance(result.error, NotFound)
        assert notifier.last.title == "Error"

    async def test_unknown_product(self, shop, seeded, customer):
        result = await shop.cart.add(customer, uuid.uuid4())
        assert isinstance(result.error, NotFound)

    async def test_variant_of_other_product(self, shop, seeded, customer):
        result = await shop.cart.add(customer, seeded.products["speaker"], seeded.variants["large"])
        assert isinstance(result.error, NotFound)

    async def test_quantity_must_be_positive(self, shop, seeded, customer):
        result = await shop.cart.add(customer, seeded.products["speaker"], quantity=0)
        assert isinstance(result.error, ValidationError)

    async def test_requires_user(self, shop, seeded):
        result = await shop.cart.add(None, seeded.products["speaker"])
        assert isinstance(result.error, Unauthenticated)
        assert result.error.message == "Please sign in to continue"


class TestChangeLines:
    async def test_update_quantity(self, shop, seeded, customer):
        cart = (await shop.cart.add(customer, seeded.products["tshirt"])).unwrap()
        cart = (await shop.cart.update_quantity(customer, cart.lines[0].line_id, 5)).unwrap()
        assert cart.item_count == 5

    async def test_update_below_one_removes(self, shop, seeded, customer):
        cart = (await shop.cart.add(customer, seeded.products["tshirt"])).unwrap()
        cart = (await shop.cart.update_quantity(customer, cart.lines[0].line_id, 0)).unwrap()
        assert cart.is_empty

    async def test_remove(self, shop, seeded, customer, notifier):
        cart = (await shop.cart.add(customer, seeded.products["tshirt"])).unwrap()
        cart = (await shop.cart.remove(customer, cart.lines[0].line_id)).unwrap()
        assert cart.is_empty
        assert notifier.last.title == "Removed"

    async def test_cannot_touch_other_users_line(self, shop, seeded, customer, other_customer):
        cart = (await shop.cart.add(customer, seeded.products["tshirt"])).unwrap()
        result = await shop.cart.remove(other_customer, cart.lines[0].line_id)
        assert isinstance(result.error, NotFound)
        assert not (await shop.cart.view(customer)).unwrap().is_empty

    async def test_clear(self, shop, seeded, customer):
        await shop.cart.add(customer, seeded.products["tshirt"])
        await shop.cart.add(customer, seeded.products["speaker"])
        assert (await shop.cart.clear(customer.id)).unwrap() == 2
        assert (await shop.cart.view(customer)).unwrap().is_empty


class TestView:
    async def test_empty(self, shop, seeded, customer):
        cart = (await shop.cart.view(customer)).unwrap()
        assert cart.is_empty
        assert cart.subtotal == 0

    async def test_carts_are_per_user(self, shop, seeded, customer, other_customer):
        await shop.cart.add(customer, seeded.products["tshirt"])
        assert (await shop.cart.view(other_customer)).unwrap().is_empty

    async def test_view_is_refreshed_after_change(self, shop, seeded, customer):
        assert (await shop.cart.view(customer)).unwrap().is_empty
        await shop.cart.add(customer, seeded.products["tshirt"])
        assert (await shop.cart.view(customer)).unwrap().item_count == 1

    async def test_requires_user(self, shop):
        assert isinstance((await shop.cart.view(None)).error, Unauthenticated)
