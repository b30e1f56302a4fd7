"""
Cached reads — tiers first, then the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from collections.abc import Callable

from kungfu import LazyCoroResult, Result, Ok, Error

from storefront.cache._types import Tier, CacheResult

log = logging.getLogger("storefront.cache")

type KeyFn[K] = Callable[[K], str]


@dataclass(slots=True, frozen=True)
class CacheExecutor[K, T, E]:
    """
    Read-through cache over one fetch.

    A fetched value populates every tier; fetch errors are never cached.
    A tier that fails is logged and skipped, so a broken tier degrades to
    a store read.

    Example:
        carts = CacheExecutor(cart_key, (LocalTier(),), fetch_cart)
        snapshot = (await carts.read(user_id)).unwrap()
    """

    key_fn: KeyFn[K]
    tiers: tuple[Tier[T], ...]
    fetch: Callable[[K], LazyCoroResult[T, E]]

    async def _lookup(self, cache_key: str) -> CacheResult[T] | None:
        for t in self.tiers:
            try:
                value = await t.get(cache_key)
            except Exception:
                log.warning("tier %s failed reading %s", t.name, cache_key, exc_info=True)
                continue
            if value is not None:
                return CacheResult(value=value, hit=True, tier=t.name)
        return None

    async def _store(self, cache_key: str, value: T) -> None:
        for t in self.tiers:
            try:
                await t.set(cache_key, value)
            except Exception:
                log.warning("tier %s failed writing %s", t.name, cache_key, exc_info=True)

    def get(self, key: K) -> LazyCoroResult[CacheResult[T], E]:
        cache_key = self.key_fn(key)

        async def execute() -> Result[CacheResult[T], E]:
            cached = await self._lookup(cache_key)
            if cached is not None:
                return Ok(cached)

            match await self.fetch(key):
                case Ok(value):
                    await self._store(cache_key, value)
                    return Ok(CacheResult(value=value, hit=False, tier=None))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(execute)

    def read(self, key: K) -> LazyCoroResult[T, E]:
        """get() without the metadata."""
        return self.get(key).map(lambda r: r.value)

    async def invalidate(self, key: K) -> bool:
        """Drop key from every tier. True if any tier held it."""
        cache_key = self.key_fn(key)
        deleted = False
        for t in self.tiers:
            if await t.delete(cache_key):
                deleted = True
        return deleted


__all__ = ("CacheExecutor", "KeyFn")
