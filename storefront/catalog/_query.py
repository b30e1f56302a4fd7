"""
Product query — filters and sorting over the active catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Select, or_, select

from storefront.db import CategoryTable, ProductTable


class Sort(Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


@dataclass(frozen=True, slots=True)
class ProductQuery:
    """
    Example:
        ProductQuery(category="audio", max_price=500000, search="wireless")
    """

    category: str | None = None  # category slug
    brand: str | None = None
    min_price: int | None = None
    max_price: int | None = None
    featured: bool = False
    search: str | None = None
    sort: Sort = Sort.NEWEST
    limit: int | None = None
    offset: int = 0


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_statement(q: ProductQuery) -> Select[tuple[ProductTable]]:
    stmt = select(ProductTable).where(ProductTable.is_active.is_(True))

    if q.category:
        stmt = stmt.join(CategoryTable, ProductTable.category_id == CategoryTable.id).where(
            CategoryTable.slug == q.category
        )
    if q.brand:
        stmt = stmt.where(ProductTable.brand == q.brand)
    if q.min_price is not None:
        stmt = stmt.where(ProductTable.price >= q.min_price)
    if q.max_price is not None:
        stmt = stmt.where(ProductTable.price <= q.max_price)
    if q.featured:
        stmt = stmt.where(ProductTable.is_featured.is_(True))
    if q.search and q.search.strip():
        pattern = f"%{_escape_like(q.search.strip())}%"
        stmt = stmt.where(
            or_(
                ProductTable.name.ilike(pattern, escape="\\"),
                ProductTable.description.ilike(pattern, escape="\\"),
                ProductTable.brand.ilike(pattern, escape="\\"),
            )
        )

    match q.sort:
        case Sort.NEWEST:
            stmt = stmt.order_by(ProductTable.created_at.desc(), ProductTable.id)
        case Sort.PRICE_ASC:
            stmt = stmt.order_by(ProductTable.price.asc(), ProductTable.id)
        case Sort.PRICE_DESC:
            stmt = stmt.order_by(ProductTable.price.desc(), ProductTable.id)

    if q.offset:
        stmt = stmt.offset(q.offset)
    if q.limit is not None:
        stmt = stmt.limit(q.limit)
    return stmt


__all__ = ("Sort", "ProductQuery", "build_statement")
