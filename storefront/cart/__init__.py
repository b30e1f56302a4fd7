"""
Cart — per-user shopping cart.

    from storefront import cart

    snapshot = await service.add(user, product_id, quantity=2)
"""

from __future__ import annotations

from storefront.cart._service import CartService, price_line, load_snapshot

__all__ = ("CartService", "price_line", "load_snapshot")
