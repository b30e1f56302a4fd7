"""
Catalog reads — products, categories, brands.
"""

from __future__ import annotations

from kungfu import LazyCoroResult
from combinators import lift as L
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.catalog._query import ProductQuery, build_statement
from storefront.db import CategoryTable, ProductTable, to_category, to_product
from storefront.domain import Category, Product
from storefront.errors import NotFound, StorefrontError, on_store_error

FEATURED_LIMIT = 8


class CatalogService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    def list_products(
        self, query: ProductQuery = ProductQuery()
    ) -> LazyCoroResult[tuple[Product, ...], StorefrontError]:
        async def fetch() -> tuple[Product, ...]:
            async with self._session() as session:
                rows = (await session.execute(build_statement(query))).scalars().all()
                return tuple(to_product(r) for r in rows)

        return L.catching_async(fetch, on_error=on_store_error)

    def get_product(self, slug: str) -> LazyCoroResult[Product, StorefrontError]:
        async def fetch() -> Product:
            async with self._session() as session:
                row = (
                    await session.execute(
                        select(ProductTable).where(
                            ProductTable.slug == slug,
                            ProductTable.is_active.is_(True),
                        )
                    )
                ).scalar_one_or_none()
                if row is None:
                    raise NotFound("Product", slug)
                return to_product(row)

        return L.catching_async(fetch, on_error=on_store_error)

    def featured(self, limit: int = FEATURED_LIMIT) -> LazyCoroResult[tuple[Product, ...], StorefrontError]:
        return self.list_products(ProductQuery(featured=True, limit=limit))

    def categories(self) -> LazyCoroResult[tuple[Category, ...], StorefrontError]:
        async def fetch() -> tuple[Category, ...]:
            async with self._session() as session:
                rows = (
                    await session.execute(
                        select(CategoryTable)
                        .where(CategoryTable.is_active.is_(True))
                        .order_by(CategoryTable.display_order, CategoryTable.name)
                    )
                ).scalars().all()
                return tuple(to_category(r) for r in rows)

        return L.catching_async(fetch, on_error=on_store_error)

    def brands(self) -> LazyCoroResult[tuple[str, ...], StorefrontError]:
        """Distinct brands of active products, alphabetical."""

        async def fetch() -> tuple[str, ...]:
            async with self._session() as session:
                rows = (
                    await session.execute(
                        select(ProductTable.brand)
                        .where(
                            ProductTable.is_active.is_(True),
                            ProductTable.brand.is_not(None),
                        )
                        .distinct()
                        .order_by(ProductTable.brand)
                    )
                ).scalars().all()
                return tuple(rows)

        return L.catching_async(fetch, on_error=on_store_error)


__all__ = ("CatalogService", "FEATURED_LIMIT")
