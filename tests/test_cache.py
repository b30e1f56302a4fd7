"""Tests for the view cache."""

import uuid

from kungfu import Error, LazyCoroResult, Ok

from storefront import cache as C


class CountingFetch:
    def __init__(self, fail=False):
        self.calls = 0
        self.fail = fail

    def __call__(self, key):
        async def fetch():
            self.calls += 1
            if self.fail:
                return Error("unavailable")
            return Ok(f"value-{key}")

        return LazyCoroResult(fetch)


class TestLocalTier:
    async def test_get_set_delete(self):
        tier = C.LocalTier(max_size=10)
        assert await tier.get("a") is None
        await tier.set("a", 1)
        assert await tier.get("a") == 1
        assert await tier.delete("a") is True
        assert await tier.delete("a") is False

    async def test_evicts_least_recently_used(self):
        tier = C.LocalTier(max_size=2)
        await tier.set("a", 1)
        await tier.set("b", 2)
        await tier.get("a")
        await tier.set("c", 3)

        assert await tier.get("b") is None
        assert await tier.get("a") == 1
        assert await tier.get("c") == 3
        assert len(tier) == 2

    async def test_delete_pattern(self):
        tier = C.LocalTier()
        await tier.set("order:u1:a", 1)
        await tier.set("order:u1:b", 2)
        await tier.set("order:u2:a", 3)

        assert await tier.delete_pattern("order:u1:*") == 2
        assert len(tier) == 1


class TestCacheExecutor:
    async def test_miss_then_hit(self):
        fetch = CountingFetch()
        executor = C.CacheExecutor(lambda k: f"k:{k}", (C.LocalTier(),), fetch)

        first = (await executor.get("x")).unwrap()
        second = (await executor.get("x")).unwrap()

        assert (first.hit, first.tier) == (False, None)
        assert (second.hit, second.tier) == (True, "local")
        assert second.value == "value-x"
        assert fetch.calls == 1

    async def test_errors_are_not_cached(self):
        fetch = CountingFetch(fail=True)
        executor = C.CacheExecutor(lambda k: f"k:{k}", (C.LocalTier(),), fetch)

        assert (await executor.get("x")).error == "unavailable"
        assert (await executor.get("x")).error == "unavailable"
        assert fetch.calls == 2

    async def test_invalidate_forces_refetch(self):
        fetch = CountingFetch()
        executor = C.CacheExecutor(lambda k: f"k:{k}", (C.LocalTier(),), fetch)

        await executor.read("x")
        assert await executor.invalidate("x") is True
        assert (await executor.read("x")).unwrap() == "value-x"
        assert fetch.calls == 2


class TestViews:
    async def test_invalidate_selected_views(self):
        views = C.Views()
        user = uuid.uuid4()
        await views.tier.set(C.cart_key(user), "cart")
        await views.tier.set(C.orders_key(user), "orders")
        await views.tier.set(C.order_key((user, uuid.uuid4())), "order")

        assert await views.invalidate(user, C.View.ORDERS, C.View.ORDER) == 2
        assert await views.tier.get(C.cart_key(user)) == "cart"

    async def test_invalidate_everything_for_user(self):
        views = C.Views()
        user, other = uuid.uuid4(), uuid.uuid4()
        await views.tier.set(C.cart_key(user), "cart")
        await views.tier.set(C.wishlist_key(user), "wishlist")
        await views.tier.set(C.cart_key(other), "other cart")

        assert await views.invalidate(user) == 2
        assert await views.tier.get(C.cart_key(other)) == "other cart"

    async def test_executor_shares_tier(self):
        views = C.Views()
        user = uuid.uuid4()
        executor = views.executor(C.cart_key, CountingFetch())

        await executor.read(user)

        assert await views.tier.get(C.cart_key(user)) == f"value-{user}"
