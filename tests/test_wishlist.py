"""Tests for the wishlist."""

import uuid

from storefront.errors import NotFound, Unauthenticated


class TestWishlist:
    async def test_add(self, shop, seeded, customer, notifier):
        assert (await shop.wishlist.add(customer, seeded.products["speaker"])).unwrap() is True
        entries = (await shop.wishlist.items(customer)).unwrap()
        assert [e.product_id for e in entries] == [seeded.products["speaker"]]
        assert notifier.last.title == "Added to wishlist"

    async def test_add_twice_is_noop(self, shop, seeded, customer):
        await shop.wishlist.add(customer, seeded.products["speaker"])
        assert (await shop.wishlist.add(customer, seeded.products["speaker"])).unwrap() is False
        assert len((await shop.wishlist.items(customer)).unwrap()) == 1

    async def test_remove(self, shop, seeded, customer):
        await shop.wishlist.add(customer, seeded.products["speaker"])
        assert (await shop.wishlist.remove(customer, seeded.products["speaker"])).unwrap() is True
        assert (await shop.wishlist.items(customer)).unwrap() == ()

    async def test_remove_absent(self, shop, seeded, customer):
        assert (await shop.wishlist.remove(customer, seeded.products["speaker"])).unwrap() is False

    async def test_toggle(self, shop, seeded, customer, notifier):
        speaker = seeded.products["speaker"]
        assert (await shop.wishlist.toggle(customer, speaker)).unwrap() is True
        assert (await shop.wishlist.contains(customer, speaker)).unwrap() is True
        assert (await shop.wishlist.toggle(customer, speaker)).unwrap() is False
        assert (await shop.wishlist.contains(customer, speaker)).unwrap() is False
        assert notifier.titles[-2:] == ["Added to wishlist", "Removed"]

    async def test_unknown_product(self, shop, seeded, customer):
        result = await shop.wishlist.add(customer, uuid.uuid4())
        assert isinstance(result.error, NotFound)

    async def test_per_user(self, shop, seeded, customer, other_customer):
        await shop.wishlist.add(customer, seeded.products["speaker"])
        assert (await shop.wishlist.items(other_customer)).unwrap() == ()

    async def test_requires_user(self, shop, seeded):
        result = await shop.wishlist.toggle(None, seeded.products["speaker"])
        assert isinstance(result.error, Unauthenticated)
