"""
Catalog back-office — product and category management for sellers and
admins, plus the dashboard summary.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from kungfu import LazyCoroResult
from combinators import lift as L
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.db import (
    CartItemTable,
    CategoryTable,
    OrderItemTable,
    OrderTable,
    ProductTable,
    VariantTable,
    WishlistTable,
    to_category,
    to_product,
    to_variant,
)
from storefront.domain import Category, OrderStatus, Product, Role, Variant
from storefront.errors import (
    Forbidden,
    NotFound,
    StorefrontError,
    on_store_error,
    parse_input,
)
from storefront.identity import User, require_role
from storefront.notify import Notifier, announce, success

log = logging.getLogger("storefront.catalog")

STAFF = (Role.SELLER, Role.ADMIN)
SLUG = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

# ═══════════════════════════════════════════════════════════════════════════════
# Inputs
# ═══════════════════════════════════════════════════════════════════════════════


class ProductInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    slug: str = Field(pattern=SLUG, max_length=220)
    description: str | None = None
    price: int = Field(ge=0)
    compare_at_price: int | None = Field(default=None, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    category_id: UUID | None = None
    brand: str | None = None
    is_active: bool = True
    is_featured: bool = False


class ProductPatch(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, pattern=SLUG, max_length=220)
    description: str | None = None
    price: int | None = Field(default=None, ge=0)
    compare_at_price: int | None = Field(default=None, ge=0)
    stock_quantity: int | None = Field(default=None, ge=0)
    category_id: UUID | None = None
    brand: str | None = None
    is_active: bool | None = None
    is_featured: bool | None = None


class VariantInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: int | None = Field(default=None, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True


class CategoryInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(pattern=SLUG, max_length=120)
    description: str | None = None
    parent_id: UUID | None = None
    display_order: int = 0
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    product_count: int
    order_count: int
    pending_orders: int
    revenue: int


# Orders that never turn into revenue.
VOID_STATUSES = (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value)


# ═══════════════════════════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogAdmin:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Notifier,
    ) -> None:
        self._session = session_factory
        self._notifier = notifier

    def _as_staff[T](
        self,
        user: User | None,
        action: str,
        work: Callable[[User], Awaitable[T]],
    ) -> LazyCoroResult[T, StorefrontError]:
        return L.from_result(require_role(user, STAFF, action)).then(
            lambda u: L.catching_async(lambda: work(u), on_error=on_store_error)
        )

    @staticmethod
    async def _owned_product(session: AsyncSession, u: User, product_id: UUID) -> ProductTable:
        row = await session.get(ProductTable, product_id)
        if row is None:
            raise NotFound("Product", product_id)
        if u.role is Role.SELLER and row.seller_id != u.id:
            raise Forbidden("manage another seller's product")
        return row

    # ═══════════════════════════════════════════════════════════════════════════
    # Products
    # ═══════════════════════════════════════════════════════════════════════════

    def create_product(
        self,
        user: User | None,
        data: ProductInput | Mapping[str, Any],
    ) -> LazyCoroResult[Product, StorefrontError]:
        """Sellers own what they create; admin-created products have no seller."""

        def create(payload: ProductInput) -> LazyCoroResult[Product, StorefrontError]:
            async def work(u: User) -> Product:
                row = ProductTable(
                    **payload.model_dump(),
                    seller_id=u.id if u.role is Role.SELLER else None,
                    variants=[],
                )
                async with self._session() as session, session.begin():
                    session.add(row)
                log.info("product %s created by %s", row.slug, u.id)
                return to_product(row)

            return self._as_staff(user, "create products", work)

        return announce(
            L.from_result(parse_input(ProductInput, data)).then(create),
            self._notifier,
            on_ok=lambda _: success("Success", "Product created successfully"),
            error_title="Failed to create product",
        )

    def update_product(
        self,
        user: User | None,
        product_id: UUID,
        patch: ProductPatch | Mapping[str, Any],
    ) -> LazyCoroResult[Product, StorefrontError]:
        def apply(payload: ProductPatch) -> LazyCoroResult[Product, StorefrontError]:
            async def work(u: User) -> Product:
                async with self._session() as session, session.begin():
                    row = await self._owned_product(session, u, product_id)
                    for name, value in payload.model_dump(exclude_unset=True).items():
                        setattr(row, name, value)
                    await session.flush()
                    return to_product(row)

            return self._as_staff(user, "update products", work)

        return announce(
            L.from_result(parse_input(ProductPatch, patch)).then(apply),
            self._notifier,
            on_ok=lambda _: success("Success", "Product updated successfully"),
            error_title="Failed to update product",
        )

    def delete_product(self, user: User | None, product_id: UUID) -> LazyCoroResult[UUID, StorefrontError]:
        """
        Delete a product.

        Cart lines and wishlist entries go with it; past order items keep
        their name and price snapshot but lose the product link.
        """

        async def work(u: User) -> UUID:
            async with self._session() as session, session.begin():
                row = await self._owned_product(session, u, product_id)
                await session.execute(delete(CartItemTable).where(CartItemTable.product_id == product_id))
                await session.execute(delete(WishlistTable).where(WishlistTable.product_id == product_id))
                variant_ids = select(VariantTable.id).where(VariantTable.product_id == product_id)
                await session.execute(
                    update(OrderItemTable)
                    .where(OrderItemTable.variant_id.in_(variant_ids))
                    .values(variant_id=None)
                )
                await session.execute(
                    update(OrderItemTable)
                    .where(OrderItemTable.product_id == product_id)
                    .values(product_id=None)
                )
                await session.delete(row)
            log.info("product %s deleted by %s", product_id, u.id)
            return product_id

        return announce(
            self._as_staff(user, "delete products", work),
            self._notifier,
            on_ok=lambda _: success("Success", "Product deleted successfully"),
            error_title="Failed to delete product",
        )

    def add_variant(
        self,
        user: User | None,
        product_id: UUID,
        data: VariantInput | Mapping[str, Any],
    ) -> LazyCoroResult[Variant, StorefrontError]:
        def add(payload: VariantInput) -> LazyCoroResult[Variant, StorefrontError]:
            async def work(u: User) -> Variant:
                async with self._session() as session, session.begin():
                    await self._owned_product(session, u, product_id)
                    row = VariantTable(product_id=product_id, **payload.model_dump())
                    session.add(row)
                return to_variant(row)

            return self._as_staff(user, "add variants", work)

        return L.from_result(parse_input(VariantInput, data)).then(add)

    # ═══════════════════════════════════════════════════════════════════════════
    # Categories
    # ═══════════════════════════════════════════════════════════════════════════

    def create_category(
        self,
        user: User | None,
        data: CategoryInput | Mapping[str, Any],
    ) -> LazyCoroResult[Category, StorefrontError]:
        async def insert(payload: CategoryInput) -> Category:
            row = CategoryTable(**payload.model_dump())
            async with self._session() as session, session.begin():
                session.add(row)
            return to_category(row)

        def create(payload: CategoryInput) -> LazyCoroResult[Category, StorefrontError]:
            return L.from_result(require_role(user, (Role.ADMIN,), "manage categories")).then(
                lambda _: L.catching_async(lambda: insert(payload), on_error=on_store_error)
            )

        return announce(
            L.from_result(parse_input(CategoryInput, data)).then(create),
            self._notifier,
            on_ok=lambda _: success("Success", "Category created successfully"),
            error_title="Failed to create category",
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Dashboard
    # ═══════════════════════════════════════════════════════════════════════════

    def dashboard(self, user: User | None) -> LazyCoroResult[DashboardSummary, StorefrontError]:
        """
        Counts for the back-office landing page.

        Admins see the whole store. Sellers see their own products, the
        orders containing them, and revenue from their own order lines.
        """

        async def work(u: User) -> DashboardSummary:
            async with self._session() as session:
                products = select(func.count()).select_from(ProductTable)
                orders = select(OrderTable.id, OrderTable.status, OrderTable.total_amount)
                if u.role is Role.SELLER:
                    own = select(ProductTable.id).where(ProductTable.seller_id == u.id)
                    products = products.where(ProductTable.seller_id == u.id)
                    orders = orders.where(
                        OrderTable.id.in_(
                            select(OrderItemTable.order_id).where(OrderItemTable.product_id.in_(own))
                        )
                    )
                    revenue_stmt = (
                        select(func.coalesce(func.sum(OrderItemTable.total_price), 0))
                        .join(OrderTable, OrderItemTable.order_id == OrderTable.id)
                        .where(
                            OrderItemTable.product_id.in_(own),
                            OrderTable.status.not_in(VOID_STATUSES),
                        )
                    )
                else:
                    revenue_stmt = select(func.coalesce(func.sum(OrderTable.total_amount), 0)).where(
                        OrderTable.status.not_in(VOID_STATUSES)
                    )

                product_count = (await session.execute(products)).scalar_one()
                order_rows = (await session.execute(orders)).all()
                revenue = (await session.execute(revenue_stmt)).scalar_one()

            return DashboardSummary(
                product_count=product_count,
                order_count=len(order_rows),
                pending_orders=sum(1 for r in order_rows if r.status == OrderStatus.PENDING.value),
                revenue=int(revenue),
            )

        return self._as_staff(user, "view the dashboard", work)


__all__ = (
    "ProductInput",
    "ProductPatch",
    "VariantInput",
    "CategoryInput",
    "DashboardSummary",
    "CatalogAdmin",
)
