"""
Database — SQLAlchemy async schema and row conversion.

    from storefront import db

    session_factory, engine = await db.create_database(settings.database_url)
"""

from __future__ import annotations

from storefront.db._tables import (
    Base,
    CategoryTable,
    ProductTable,
    VariantTable,
    CartItemTable,
    WishlistTable,
    CouponTable,
    OrderTable,
    OrderItemTable,
    utcnow,
)
from storefront.db._convert import (
    aware,
    to_category,
    to_variant,
    to_product,
    to_coupon,
    to_order_item,
    to_order,
    to_wishlist_entry,
)
from storefront.db._engine import create_database

__all__ = (
    "Base",
    "CategoryTable",
    "ProductTable",
    "VariantTable",
    "CartItemTable",
    "WishlistTable",
    "CouponTable",
    "OrderTable",
    "OrderItemTable",
    "utcnow",
    "aware",
    "to_category",
    "to_variant",
    "to_product",
    "to_coupon",
    "to_order_item",
    "to_order",
    "to_wishlist_entry",
    "create_database",
)
