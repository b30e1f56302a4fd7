"""
Error values.

Operations return them inside Error(...); a few are raised inside store
transactions so the transaction rolls back, then caught at the boundary by
on_store_error and turned back into values.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

import pydantic
from kungfu import Result, Ok, Error
from combinators import TimeoutError as CombinatorTimeout
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.domain import OrderStatus, Role

log = logging.getLogger("storefront.errors")


class StorefrontError(Exception):
    """Base for every storefront error value."""

    @property
    def message(self) -> str:
        return str(self)


# ═══════════════════════════════════════════════════════════════════════════════
# Access
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(eq=False)
class Unauthenticated(StorefrontError):
    def __str__(self) -> str:
        return "Please sign in to continue"


@dataclass(eq=False)
class Forbidden(StorefrontError):
    action: str

    def __str__(self) -> str:
        return f"Not allowed to {self.action}"


@dataclass(eq=False)
class DuplicateSubmission(StorefrontError):
    key: str

    def __str__(self) -> str:
        return "This request is already being processed"


# ═══════════════════════════════════════════════════════════════════════════════
# Input
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(eq=False)
class NotFound(StorefrontError):
    entity: str
    id: object

    def __str__(self) -> str:
        return f"{self.entity} {self.id} not found"


@dataclass(eq=False)
class EmptyCart(StorefrontError):
    def __str__(self) -> str:
        return "Your cart is empty"


@dataclass(eq=False)
class ValidationError(StorefrontError):
    """Malformed input; fields names the offending inputs."""

    detail: str
    fields: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.detail

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> ValidationError:
        problems = exc.errors()
        names = tuple(".".join(str(p) for p in e["loc"]) for e in problems)
        detail = "; ".join(
            f"{name}: {e['msg']}" if name else e["msg"] for name, e in zip(names, problems)
        )
        return cls(detail or "Invalid input", names)


def parse_input[M: pydantic.BaseModel](
    model: type[M], data: M | Mapping[str, Any]
) -> Result[M, ValidationError]:
    """Validate caller input into model."""
    if isinstance(data, model):
        return Ok(data)
    try:
        return Ok(model.model_validate(data))
    except pydantic.ValidationError as exc:
        return Error(ValidationError.from_pydantic(exc))


# ═══════════════════════════════════════════════════════════════════════════════
# Coupons
# ═══════════════════════════════════════════════════════════════════════════════


class CouponErrorKind(Enum):
    NOT_FOUND = auto()
    NOT_YET_ACTIVE = auto()
    EXPIRED = auto()
    BELOW_MINIMUM = auto()
    USAGE_LIMIT_REACHED = auto()


@dataclass(eq=False)
class CouponError(StorefrontError):
    kind: CouponErrorKind
    detail: str

    def __str__(self) -> str:
        return self.detail


# ═══════════════════════════════════════════════════════════════════════════════
# Persistence
# ═══════════════════════════════════════════════════════════════════════════════


class PersistenceFailureKind(Enum):
    DUPLICATE = auto()  # unique order number collided
    CONFLICT = auto()  # concurrent write or insufficient stock
    TIMEOUT = auto()
    STORE = auto()  # anything else the store reported


@dataclass(eq=False)
class PersistenceFailure(StorefrontError):
    kind: PersistenceFailureKind
    detail: str

    def __str__(self) -> str:
        return self.detail


@dataclass(eq=False)
class IllegalStatusTransition(StorefrontError):
    current: OrderStatus
    target: OrderStatus
    actor: Role
    order_id: object = None

    def __str__(self) -> str:
        return (
            f"{self.actor.value} cannot move an order from "
            f"{self.current.value} to {self.target.value}"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Boundary Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def on_store_error(exc: Exception) -> StorefrontError:
    """
    Map an exception from a store call to an error value.

    Storefront errors raised to roll a transaction back pass through.
    """
    match exc:
        case StorefrontError():
            return exc
        case IntegrityError() if "order_number" in str(exc.orig):
            return PersistenceFailure(
                PersistenceFailureKind.DUPLICATE, "Order number already taken"
            )
        case IntegrityError():
            log.warning("integrity error: %s", exc.orig)
            return PersistenceFailure(PersistenceFailureKind.CONFLICT, str(exc.orig))
        case CombinatorTimeout():
            return PersistenceFailure(PersistenceFailureKind.TIMEOUT, str(exc))
        case SQLAlchemyError():
            log.error("store error: %s", exc)
            return PersistenceFailure(PersistenceFailureKind.STORE, str(exc))
        case _:
            log.exception("unexpected error in store call")
            return PersistenceFailure(PersistenceFailureKind.STORE, str(exc))


__all__ = (
    "StorefrontError",
    "Unauthenticated",
    "Forbidden",
    "DuplicateSubmission",
    "NotFound",
    "EmptyCart",
    "ValidationError",
    "parse_input",
    "CouponErrorKind",
    "CouponError",
    "PersistenceFailureKind",
    "PersistenceFailure",
    "IllegalStatusTransition",
    "on_store_error",
)
