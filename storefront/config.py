"""
Settings — environment-driven configuration.

    from storefront.config import Settings, configure_logging

    settings = Settings.from_env()
    configure_logging(settings.log_level)

Every field reads a STOREFRONT_<FIELD> variable; unset variables keep the
defaults below.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields

ENV_PREFIX = "STOREFRONT_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Runtime configuration.

    Money values are minor units: 50000 is ₹500.00.
    """

    database_url: str = "sqlite+aiosqlite:///:memory:"
    free_shipping_threshold: int = 50000
    shipping_fee: int = 5000
    currency: str = "INR"
    order_number_prefix: str = "ORD"
    order_number_attempts: int = 3
    order_timeout_seconds: float = 10.0
    cache_size: int = 1000
    feed_buffer: int = 100
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from STOREFRONT_* variables."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            match f.default:
                case int():
                    values[f.name] = int(raw)
                case float():
                    values[f.name] = float(raw)
                case _:
                    values[f.name] = raw
        settings = cls(**values)  # type: ignore[arg-type]
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.free_shipping_threshold < 0 or self.shipping_fee < 0:
            raise ValueError("shipping amounts must be >= 0")
        if self.order_number_attempts < 1:
            raise ValueError("order_number_attempts must be >= 1")
        if self.order_timeout_seconds <= 0:
            raise ValueError("order_timeout_seconds must be > 0")
        if self.cache_size < 1:
            raise ValueError("cache_size must be >= 1")


# ═══════════════════════════════════════════════════════════════════════════════
# Logging
# ═══════════════════════════════════════════════════════════════════════════════


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for an embedding process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


__all__ = ("Settings", "configure_logging", "ENV_PREFIX")
