"""
Identifier and money aliases shared by the domain types.
"""

from __future__ import annotations

from uuid import UUID

type UserId = UUID
type ProductId = UUID
type VariantId = UUID
type OrderId = UUID

type Money = int
"""Amount in minor currency units (paise, cents)."""

__all__ = (
    "UserId",
    "ProductId",
    "VariantId",
    "OrderId",
    "Money",
)
