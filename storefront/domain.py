"""
Domain — catalog, cart, coupons and orders.

Money is an int in minor units (paise). Percentages are Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront._types import Money, OrderId, ProductId, UserId, VariantId


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class Role(Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
    ADMIN = "admin"


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @property
    def is_terminal(self) -> bool:
        return self in (
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
            OrderStatus.REFUNDED,
        )


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    COD = "cod"  # cash on delivery, the only method offered


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Category:
    id: UUID
    name: str
    slug: str
    description: str | None
    parent_id: UUID | None
    display_order: int
    is_active: bool


@dataclass(frozen=True, slots=True)
class Variant:
    id: UUID
    product_id: ProductId
    name: str
    price: Money | None  # overrides the product price when set
    stock_quantity: int
    is_active: bool


@dataclass(frozen=True, slots=True)
class Product:
    id: UUID
    name: str
    slug: str
    description: str | None
    price: Money
    compare_at_price: Money | None
    stock_quantity: int
    category_id: UUID | None
    brand: str | None
    is_active: bool
    is_featured: bool
    seller_id: UserId | None
    created_at: datetime
    variants: tuple[Variant, ...] = ()

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricedLine:
    """Cart line with its price resolved from the live catalog."""

    line_id: UUID
    product_id: ProductId
    variant_id: VariantId | None
    product_name: str
    variant_name: str | None
    unit_price: Money
    quantity: int

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    user_id: UserId
    lines: tuple[PricedLine, ...]

    @property
    def subtotal(self) -> Money:
        return sum(line.line_total for line in self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True, slots=True)
class WishlistEntry:
    id: UUID
    user_id: UUID
    product_id: UUID
    created_at: datetime


# ═══════════════════════════════════════════════════════════════════════════════
# Coupons
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Coupon:
    """
    Discount rule.

    discount_value is a percentage for PERCENTAGE coupons and minor units
    for FIXED ones.
    """

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    min_order_amount: Money | None = None
    max_discount_amount: Money | None = None
    usage_limit: int | None = None
    used_count: int = 0
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    description: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingAddress(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=200)
    phone: str = Field(pattern=r"^\+?[0-9][0-9 ()-]{6,19}$")
    address_line1: str = Field(min_length=1, max_length=300)
    address_line2: str | None = None
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=3, max_length=12)
    country: str = "India"


@dataclass(frozen=True, slots=True)
class OrderItem:
    id: UUID
    order_id: OrderId
    product_id: ProductId | None
    variant_id: VariantId | None
    product_name: str
    variant_name: str | None
    quantity: int
    unit_price: Money
    total_price: Money


@dataclass(frozen=True, slots=True)
class Order:
    id: UUID
    order_number: str
    user_id: UserId
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    subtotal: Money
    discount_amount: Money
    shipping_amount: Money
    total_amount: Money
    coupon_code: str | None
    shipping_address: ShippingAddress
    notes: str | None
    tracking_number: str | None
    tracking_url: str | None
    created_at: datetime
    updated_at: datetime
    items: tuple[OrderItem, ...] = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Formatting
# ═══════════════════════════════════════════════════════════════════════════════

CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}


def format_money(amount: int, currency: str = "INR") -> str:
    """Render minor units for people: 50000 -> ₹500, 50050 -> ₹500.50."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    major, minor = divmod(amount, 100)
    if minor:
        return f"{symbol}{major}.{minor:02d}"
    return f"{symbol}{major}"


__all__ = (
    "Role",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "DiscountType",
    "Category",
    "Variant",
    "Product",
    "PricedLine",
    "CartSnapshot",
    "WishlistEntry",
    "Coupon",
    "ShippingAddress",
    "OrderItem",
    "Order",
    "format_money",
    "CURRENCY_SYMBOLS",
)
