"""
storefront — e-commerce core: catalog, cart, checkout, orders, wishlist.

    from storefront import checkout as CO   # Pricing and order placement
    from storefront import orders as O      # Status machine and buyer views
    from storefront import coupon as K      # Coupon evaluation
    from storefront import saga as S        # Steps with compensation
    from storefront import cache as C       # Per-user view caching
    from storefront import feed as F        # Change events, live order tracking

    shop = await create_storefront(Settings.from_env())
"""

from storefront import saga
from storefront import cache
from storefront import db
from storefront import feed
from storefront import coupon
from storefront import catalog
from storefront import cart
from storefront import wishlist
from storefront import checkout
from storefront import orders
from storefront._types import Money
from storefront.config import Settings, configure_logging
from storefront.app import Storefront, create_storefront

__version__ = "0.1.0"

__all__ = (
    "saga",
    "cache",
    "db",
    "feed",
    "coupon",
    "catalog",
    "cart",
    "wishlist",
    "checkout",
    "orders",
    "Money",
    "Settings",
    "configure_logging",
    "Storefront",
    "create_storefront",
)
