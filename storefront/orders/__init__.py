"""
Orders — buyer views and the status machine.

    from storefront import orders as O

    await service.cancel(buyer, order_id)
    await service.ship(seller, order_id, O.Tracking("AWB123", "https://track.example/AWB123"))

    O.check_transition(Role.SELLER, OrderStatus.PENDING, OrderStatus.CONFIRMED)   # Ok
"""

from __future__ import annotations

from storefront.orders._machine import (
    TRANSITIONS,
    allowed_targets,
    check_transition,
    payment_status_for,
)
from storefront.orders._service import Tracking, OrderService, status_event

__all__ = (
    "TRANSITIONS",
    "allowed_targets",
    "check_transition",
    "payment_status_for",
    "Tracking",
    "OrderService",
    "status_event",
)
