"""
Cache types.
"""

from __future__ import annotations

import fnmatch
from collections import OrderedDict
from dataclasses import dataclass
from typing import Protocol

# ═══════════════════════════════════════════════════════════════════════════════
# Tier Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Tier[T](Protocol):
    """
    Cache tier protocol.

    Implement this to put views in a shared backend; keys are plain
    strings such as "cart:<user>" or "order:<user>:<order>".
    """

    @property
    def name(self) -> str:
        """Tier name for debugging."""
        ...

    async def get(self, key: str) -> T | None:
        """Get value. Returns None on miss."""
        ...

    async def set(self, key: str, value: T) -> None:
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob pattern. Returns count."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Local Tier — In-Memory LRU (Default)
# ═══════════════════════════════════════════════════════════════════════════════


class LocalTier[T]:
    """
    In-memory LRU cache tier.

    Example:
        tier = LocalTier[CartSnapshot](max_size=1000)
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._max_size = max_size
        self._entries: OrderedDict[str, T] = OrderedDict()

    @property
    def name(self) -> str:
        return "local"

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> T | None:
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    async def set(self, key: str, value: T) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self._max_size:
            self._entries.popitem(last=False)
        self._entries[key] = value

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def delete_pattern(self, pattern: str) -> int:
        doomed = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheResult[T]:
    """Cached read with the tier that served it (None on a fresh fetch)."""

    value: T
    hit: bool
    tier: str | None


__all__ = ("Tier", "LocalTier", "CacheResult")
