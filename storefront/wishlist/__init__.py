"""
Wishlist — per-user favourites.
"""

from __future__ import annotations

from storefront.wishlist._service import WishlistService

__all__ = ("WishlistService",)
