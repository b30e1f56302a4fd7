"""
Order numbers — <prefix>-<YYYYMMDD>-<6 base32 chars>.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import datetime

from storefront.db import utcnow

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
SUFFIX_LENGTH = 6

type NumberFactory = Callable[[], str]
"""Produces a fresh order number on every call."""


def generate_order_number(prefix: str = "ORD", now: datetime | None = None) -> str:
    day = (now or utcnow()).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{day}-{suffix}"


def number_factory(prefix: str = "ORD", clock: Callable[[], datetime] = utcnow) -> NumberFactory:
    return lambda: generate_order_number(prefix, clock())


__all__ = (
    "ALPHABET",
    "NumberFactory",
    "generate_order_number",
    "number_factory",
)
