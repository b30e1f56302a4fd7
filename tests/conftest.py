"""Pytest fixtures for storefront tests."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest

from storefront import Settings, create_storefront
from storefront.db import CategoryTable, CouponTable, ProductTable, VariantTable
from storefront.domain import Role
from storefront.identity import User
from storefront.notify import Notice, NoticeKind


@dataclass
class RecordingNotifier:
    """Keeps every notice for assertions."""

    notices: list[Notice] = field(default_factory=list)

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notices]

    @property
    def last(self) -> Notice:
        return self.notices[-1]

    def errors(self) -> list[Notice]:
        return [n for n in self.notices if n.kind is NoticeKind.ERROR]

    def clear(self) -> None:
        self.notices.clear()


@dataclass
class Seeded:
    """Ids of the rows every test starts with."""

    products: dict[str, uuid.UUID]
    variants: dict[str, uuid.UUID]
    categories: dict[str, uuid.UUID]


async def eventually(predicate, timeout=1.0):
    """Wait until predicate() holds, yielding to the event loop."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def customer():
    return User(id=uuid.uuid4(), email="buyer@example.com", role=Role.CUSTOMER)


@pytest.fixture
def other_customer():
    return User(id=uuid.uuid4(), email="other@example.com", role=Role.CUSTOMER)


@pytest.fixture
def seller():
    return User(id=uuid.uuid4(), email="seller@example.com", role=Role.SELLER)


@pytest.fixture
def other_seller():
    return User(id=uuid.uuid4(), email="rival@example.com", role=Role.SELLER)


@pytest.fixture
def admin():
    return User(id=uuid.uuid4(), email="admin@example.com", role=Role.ADMIN)


@pytest.fixture
def address():
    return {
        "full_name": "Asha Rao",
        "phone": "+91 98765 43210",
        "address_line1": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal_code": "560001",
    }


@pytest.fixture
async def shop(settings, notifier):
    """A storefront over a fresh in-memory database."""
    storefront = await create_storefront(settings, notifier)
    yield storefront
    await storefront.close()


@pytest.fixture
async def seeded(shop, seller):
    """
    Catalog:
        headphones  45000  stock 10  audio    Sonic      featured
        speaker     60000  stock 5   audio    Boom
        tshirt       1500  stock 20  apparel  Cotton Co  variant "Large" 2000, stock 3
        retired     10000  inactive
    Coupons:
        SAVE10   10%, min 10000
        FLAT500  fixed 50000 (₹500)
        EXPIRED  expired yesterday
        SOON     starts tomorrow
        ONCE     fixed 1000, usage limit 1
    """
    now = datetime.now(UTC)
    audio = CategoryTable(name="Audio", slug="audio", display_order=1)
    apparel = CategoryTable(name="Apparel", slug="apparel", display_order=2)
    hidden = CategoryTable(name="Hidden", slug="hidden", display_order=0, is_active=False)

    def product(slug, price, stock, category, brand, *, minutes, **extra):
        return ProductTable(
            name=slug.title(),
            slug=slug,
            description=f"The {slug}",
            price=price,
            stock_quantity=stock,
            category=category,
            brand=brand,
            seller_id=seller.id,
            created_at=now - timedelta(minutes=minutes),
            **extra,
        )

    headphones = product("headphones", 45000, 10, audio, "Sonic", minutes=1, is_featured=True)
    speaker = product("speaker", 60000, 5, audio, "Boom", minutes=2)
    tshirt = product("tshirt", 1500, 20, apparel, "Cotton Co", minutes=3)
    retired = product("retired", 10000, 5, audio, "Gone", minutes=4, is_active=False)
    large = VariantTable(name="Large", price=2000, stock_quantity=3)
    tshirt.variants.append(large)

    coupons = [
        CouponTable(
            code="SAVE10", discount_type="percentage", discount_value=Decimal("10"),
            min_order_amount=10000,
        ),
        CouponTable(code="FLAT500", discount_type="fixed", discount_value=Decimal("50000")),
        CouponTable(
            code="EXPIRED", discount_type="fixed", discount_value=Decimal("1000"),
            expires_at=now - timedelta(days=1),
        ),
        CouponTable(
            code="SOON", discount_type="fixed", discount_value=Decimal("1000"),
            starts_at=now + timedelta(days=1),
        ),
        CouponTable(
            code="ONCE", discount_type="fixed", discount_value=Decimal("1000"),
            usage_limit=1,
        ),
    ]

    async with shop.sessions() as session, session.begin():
        session.add_all([audio, apparel, hidden, headphones, speaker, tshirt, retired, *coupons])

    return Seeded(
        products={p.slug: p.id for p in (headphones, speaker, tshirt, retired)},
        variants={"large": large.id},
        categories={c.slug: c.id for c in (audio, apparel, hidden)},
    )
