"""
Row → domain conversion.
"""

from __future__ import annotations

from datetime import datetime, UTC
from decimal import Decimal

from storefront.db._tables import (
    CategoryTable,
    CouponTable,
    OrderItemTable,
    OrderTable,
    ProductTable,
    VariantTable,
    WishlistTable,
)
from storefront.domain import (
    Category,
    Coupon,
    DiscountType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Product,
    ShippingAddress,
    Variant,
    WishlistEntry,
)


def aware(dt: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on the way back; stored values are UTC."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=UTC)


def to_category(row: CategoryTable) -> Category:
    return Category(
        id=row.id,
        name=row.name,
        slug=row.slug,
        description=row.description,
        parent_id=row.parent_id,
        display_order=row.display_order,
        is_active=row.is_active,
    )


def to_variant(row: VariantTable) -> Variant:
    return Variant(
        id=row.id,
        product_id=row.product_id,
        name=row.name,
        price=row.price,
        stock_quantity=row.stock_quantity,
        is_active=row.is_active,
    )


def to_product(row: ProductTable) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        slug=row.slug,
        description=row.description,
        price=row.price,
        compare_at_price=row.compare_at_price,
        stock_quantity=row.stock_quantity,
        category_id=row.category_id,
        brand=row.brand,
        is_active=row.is_active,
        is_featured=row.is_featured,
        seller_id=row.seller_id,
        created_at=aware(row.created_at),  # type: ignore[arg-type]
        variants=tuple(to_variant(v) for v in row.variants if v.is_active),
    )


def to_coupon(row: CouponTable) -> Coupon:
    return Coupon(
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=Decimal(row.discount_value),
        min_order_amount=row.min_order_amount,
        max_discount_amount=row.max_discount_amount,
        usage_limit=row.usage_limit,
        used_count=row.used_count,
        is_active=row.is_active,
        starts_at=aware(row.starts_at),
        expires_at=aware(row.expires_at),
        description=row.description,
    )


def to_order_item(row: OrderItemTable) -> OrderItem:
    return OrderItem(
        id=row.id,
        order_id=row.order_id,
        product_id=row.product_id,
        variant_id=row.variant_id,
        product_name=row.product_name,
        variant_name=row.variant_name,
        quantity=row.quantity,
        unit_price=row.unit_price,
        total_price=row.total_price,
    )


def to_order(row: OrderTable) -> Order:
    return Order(
        id=row.id,
        order_number=row.order_number,
        user_id=row.user_id,
        status=OrderStatus(row.status),
        payment_status=PaymentStatus(row.payment_status),
        payment_method=PaymentMethod(row.payment_method),
        subtotal=row.subtotal,
        discount_amount=row.discount_amount,
        shipping_amount=row.shipping_amount,
        total_amount=row.total_amount,
        coupon_code=row.coupon_code,
        shipping_address=ShippingAddress.model_validate(row.shipping_address),
        notes=row.notes,
        tracking_number=row.tracking_number,
        tracking_url=row.tracking_url,
        created_at=aware(row.created_at),  # type: ignore[arg-type]
        updated_at=aware(row.updated_at),  # type: ignore[arg-type]
        items=tuple(to_order_item(i) for i in row.items),
    )


def to_wishlist_entry(row: WishlistTable) -> WishlistEntry:
    return WishlistEntry(
        id=row.id,
        user_id=row.user_id,
        product_id=row.product_id,
        created_at=aware(row.created_at),  # type: ignore[arg-type]
    )


__all__ = (
    "aware",
    "to_category",
    "to_variant",
    "to_product",
    "to_coupon",
    "to_order_item",
    "to_order",
    "to_wishlist_entry",
)
