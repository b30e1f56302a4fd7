"""Tests for catalog reads and the back-office."""

import uuid

import pytest

from storefront.catalog import ProductQuery, Sort
from storefront.errors import Forbidden, NotFound, Unauthenticated, ValidationError


def slugs(products):
    return [p.slug for p in products]


class TestListProducts:
    async def test_active_newest_first(self, shop, seeded):
        products = (await shop.catalog.list_products()).unwrap()
        assert slugs(products) == ["headphones", "speaker", "tshirt"]

    async def test_by_category(self, shop, seeded):
        products = (await shop.catalog.list_products(ProductQuery(category="apparel"))).unwrap()
        assert slugs(products) == ["tshirt"]

    async def test_unknown_category_is_empty(self, shop, seeded):
        assert (await shop.catalog.list_products(ProductQuery(category="garden"))).unwrap() == ()

    async def test_by_brand(self, shop, seeded):
        products = (await shop.catalog.list_products(ProductQuery(brand="Boom"))).unwrap()
        assert slugs(products) == ["speaker"]

    async def test_price_range(self, shop, seeded):
        query = ProductQuery(min_price=2000, max_price=50000)
        assert slugs((await shop.catalog.list_products(query)).unwrap()) == ["headphones"]

    @pytest.mark.parametrize(
        "sort,expected",
        [
            (Sort.PRICE_ASC, ["tshirt", "headphones", "speaker"]),
            (Sort.PRICE_DESC, ["speaker", "headphones", "tshirt"]),
        ],
    )
    async def test_sort(self, shop, seeded, sort, expected):
        assert slugs((await shop.catalog.list_products(ProductQuery(sort=sort))).unwrap()) == expected

    async def test_search_is_case_insensitive(self, shop, seeded):
        assert slugs((await shop.catalog.list_products(ProductQuery(search="SONIC"))).unwrap()) == [
            "headphones"
        ]
        assert slugs((await shop.catalog.list_products(ProductQuery(search="the speak"))).unwrap()) == [
            "speaker"
        ]

    async def test_search_escapes_wildcards(self, shop, seeded):
        assert (await shop.catalog.list_products(ProductQuery(search="%"))).unwrap() == ()

    async def test_paging(self, shop, seeded):
        page = (await shop.catalog.list_products(ProductQuery(limit=1, offset=1))).unwrap()
        assert slugs(page) == ["speaker"]

    async def test_variants_included(self, shop, seeded):
        tshirt = (await shop.catalog.get_product("tshirt")).unwrap()
        assert [v.name for v in tshirt.variants] == ["Large"]


class TestReads:
    async def test_get_product(self, shop, seeded):
        product = (await shop.catalog.get_product("speaker")).unwrap()
        assert product.price == 60000
        assert product.in_stock

    async def test_get_inactive_product(self, shop, seeded):
        result = await shop.catalog.get_product("retired")
        assert isinstance(result.error, NotFound)

    async def test_featured(self, shop, seeded):
        assert slugs((await shop.catalog.featured()).unwrap()) == ["headphones"]

    async def test_categories(self, shop, seeded):
        categories = (await shop.catalog.categories()).unwrap()
        assert [c.slug for c in categories] == ["audio", "apparel"]

    async def test_brands(self, shop, seeded):
        assert (await shop.catalog.brands()).unwrap() == ("Boom", "Cotton Co", "Sonic")


class TestProductAdmin:
    async def test_seller_creates_own_product(self, shop, seeded, seller, notifier):
        product = (
            await shop.admin.create_product(
                seller,
                {"name": "Earbuds", "slug": "earbuds", "price": 249900, "stock_quantity": 4},
            )
        ).unwrap()
        assert product.seller_id == seller.id
        assert product.variants == ()
        assert notifier.last.message == "Product created successfully"
        assert (await shop.catalog.get_product("earbuds")).unwrap().id == product.id

    async def test_customer_forbidden(self, shop, seeded, customer, notifier):
        result = await shop.admin.create_product(customer, {"name": "X", "slug": "x", "price": 1})
        assert isinstance(result.error, Forbidden)
        assert notifier.last.title == "Failed to create product"

    async def test_requires_user(self, shop, seeded):
        result = await shop.admin.create_product(None, {"name": "X", "slug": "x", "price": 1})
        assert isinstance(result.error, Unauthenticated)

    async def test_invalid_input(self, shop, seeded, seller):
        result = await shop.admin.create_product(seller, {"name": "X", "slug": "Not A Slug", "price": -1})
        assert isinstance(result.error, ValidationError)
        assert set(result.error.fields) == {"slug", "price"}

    async def test_update_own_product(self, shop, seeded, seller):
        product = (
            await shop.admin.update_product(seller, seeded.products["speaker"], {"price": 55000})
        ).unwrap()
        assert product.price == 55000
        assert product.name == "Speaker"

    async def test_other_seller_cannot_update(self, shop, seeded, other_seller):
        result = await shop.admin.update_product(other_seller, seeded.products["speaker"], {"price": 1})
        assert isinstance(result.error, Forbidden)

    async def test_admin_updates_any_product(self, shop, seeded, admin):
        product = (
            await shop.admin.update_product(admin, seeded.products["speaker"], {"is_featured": True})
        ).unwrap()
        assert product.is_featured

    async def test_update_unknown(self, shop, seeded, admin):
        result = await shop.admin.update_product(admin, uuid.uuid4(), {"price": 1})
        assert isinstance(result.error, NotFound)

    async def test_delete_clears_carts_and_wishlists(self, shop, seeded, seller, customer):
        speaker = seeded.products["speaker"]
        await shop.cart.add(customer, speaker)
        await shop.wishlist.add(customer, speaker)

        assert (await shop.admin.delete_product(seller, speaker)).unwrap() == speaker

        assert isinstance((await shop.catalog.get_product("speaker")).error, NotFound)
        assert (await shop.cart.snapshot(customer.id)).unwrap().is_empty

    async def test_delete_keeps_order_history(self, shop, seeded, seller, customer, address):
        speaker = seeded.products["speaker"]
        await shop.cart.add(customer, speaker)
        order = (await shop.checkout.place_order(customer, address)).unwrap()

        (await shop.admin.delete_product(seller, speaker)).unwrap()

        kept = (await shop.orders.get_order(customer, order.id)).unwrap()
        assert kept.items[0].product_name == "Speaker"
        assert kept.items[0].product_id is None

    async def test_add_variant(self, shop, seeded, seller):
        variant = (
            await shop.admin.add_variant(
                seller, seeded.products["tshirt"], {"name": "Small", "price": 1400, "stock_quantity": 5}
            )
        ).unwrap()
        assert variant.product_id == seeded.products["tshirt"]
        tshirt = (await shop.catalog.get_product("tshirt")).unwrap()
        assert {v.name for v in tshirt.variants} == {"Large", "Small"}


class TestCategoryAdmin:
    async def test_admin_creates_category(self, shop, seeded, admin):
        category = (
            await shop.admin.create_category(admin, {"name": "Garden", "slug": "garden", "display_order": 5})
        ).unwrap()
        assert category.slug == "garden"
        assert "garden" in [c.slug for c in (await shop.catalog.categories()).unwrap()]

    async def test_seller_cannot_create_category(self, shop, seeded, seller):
        result = await shop.admin.create_category(seller, {"name": "Garden", "slug": "garden"})
        assert isinstance(result.error, Forbidden)


class TestDashboard:
    async def test_admin_totals(self, shop, seeded, admin, customer, address):
        await shop.cart.add(customer, seeded.products["headphones"])
        first = (await shop.checkout.place_order(customer, address)).unwrap()
        await shop.cart.add(customer, seeded.products["speaker"])
        second = (await shop.checkout.place_order(customer, address)).unwrap()
        (await shop.orders.cancel(customer, first.id)).unwrap()

        summary = (await shop.admin.dashboard(admin)).unwrap()

        assert summary.product_count == 4
        assert summary.order_count == 2
        assert summary.pending_orders == 1
        assert summary.revenue == second.total_amount

    async def test_seller_scope(self, shop, seeded, other_seller):
        summary = (await shop.admin.dashboard(other_seller)).unwrap()
        assert (summary.product_count, summary.order_count, summary.revenue) == (0, 0, 0)

    async def test_customer_forbidden(self, shop, seeded, customer):
        assert isinstance((await shop.admin.dashboard(customer)).error, Forbidden)
