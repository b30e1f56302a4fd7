"""
Catalog — storefront reads and the seller/admin back-office.

    from storefront import catalog as C

    products = await service.list_products(C.ProductQuery(category="audio", sort=C.Sort.PRICE_ASC))
    created = await admin.create_product(seller, {"name": "Earbuds", "slug": "earbuds", "price": 249900})
"""

from __future__ import annotations

from storefront.catalog._query import Sort, ProductQuery, build_statement
from storefront.catalog._service import CatalogService, FEATURED_LIMIT
from storefront.catalog._admin import (
    ProductInput,
    ProductPatch,
    VariantInput,
    CategoryInput,
    DashboardSummary,
    CatalogAdmin,
)

__all__ = (
    # Query
    "Sort",
    "ProductQuery",
    "build_statement",
    # Reads
    "CatalogService",
    "FEATURED_LIMIT",
    # Back-office
    "ProductInput",
    "ProductPatch",
    "VariantInput",
    "CategoryInput",
    "DashboardSummary",
    "CatalogAdmin",
)
