"""
Order status machine — who may move an order where.

    pending ──► confirmed ──► processing ──► shipped ──► delivered
    pending | confirmed | processing ──► cancelled
    confirmed | processing | shipped ──► refunded      (admin only)

Buyers only cancel their own pending orders. Sellers drive the forward
path and may reject a pending order. Admins can do everything a seller
can, plus cancel a confirmed or processing order and refund anything
accepted but not yet delivered.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from storefront.domain import OrderStatus, PaymentStatus, Role
from storefront.errors import IllegalStatusTransition

type Edge = tuple[OrderStatus, OrderStatus]

_P = OrderStatus.PENDING
_C = OrderStatus.CONFIRMED
_PR = OrderStatus.PROCESSING
_S = OrderStatus.SHIPPED
_D = OrderStatus.DELIVERED
_X = OrderStatus.CANCELLED
_R = OrderStatus.REFUNDED

_BUYER: frozenset[Edge] = frozenset({(_P, _X)})

_SELLER: frozenset[Edge] = frozenset({
    (_P, _C),
    (_P, _X),
    (_C, _PR),
    (_PR, _S),
    (_S, _D),
})

_ADMIN: frozenset[Edge] = _SELLER | frozenset({
    (_C, _X),
    (_PR, _X),
    (_C, _R),
    (_PR, _R),
    (_S, _R),
})

TRANSITIONS: dict[Role, frozenset[Edge]] = {
    Role.CUSTOMER: _BUYER,
    Role.SELLER: _SELLER,
    Role.ADMIN: _ADMIN,
}


def allowed_targets(actor: Role, current: OrderStatus) -> frozenset[OrderStatus]:
    return frozenset(target for source, target in TRANSITIONS[actor] if source is current)


def check_transition(
    actor: Role,
    current: OrderStatus,
    target: OrderStatus,
) -> Result[OrderStatus, IllegalStatusTransition]:
    if (current, target) in TRANSITIONS[actor]:
        return Ok(target)
    return Error(IllegalStatusTransition(current, target, actor))


def payment_status_for(target: OrderStatus, current: PaymentStatus) -> PaymentStatus:
    """Cash on delivery settles on delivery; a refund reverses it."""
    match target:
        case OrderStatus.DELIVERED:
            return PaymentStatus.COMPLETED
        case OrderStatus.REFUNDED:
            return PaymentStatus.REFUNDED
        case _:
            return current


__all__ = (
    "TRANSITIONS",
    "allowed_targets",
    "check_transition",
    "payment_status_for",
)
