"""
Change feed types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from storefront.db import utcnow


class ChangeKind(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """
    One row change.

    new holds the row after the change (before it, for DELETE); old holds
    the changed columns' previous values for UPDATE.
    """

    table: str
    kind: ChangeKind
    new: Mapping[str, Any]
    old: Mapping[str, Any] | None = None
    at: datetime = field(default_factory=utcnow)

    def changed(self, column: str) -> bool:
        return self.old is not None and column in self.old and self.old[column] != self.new.get(column)


__all__ = ("ChangeKind", "ChangeEvent")
