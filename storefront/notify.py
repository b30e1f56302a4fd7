"""
Notifications — user-facing feedback ("toasts").

Fire-and-forget: a notifier never fails the action that triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from kungfu import LazyCoroResult
from combinators import flow

log = logging.getLogger("storefront.notify")


class NoticeKind(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    kind: NoticeKind
    title: str
    message: str


class Notifier(Protocol):
    def notify(self, notice: Notice) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes each notice to the storefront.notify logger."""

    def notify(self, notice: Notice) -> None:
        level = logging.INFO if notice.kind is NoticeKind.SUCCESS else logging.WARNING
        log.log(level, "%s: %s", notice.title, notice.message)


def success(title: str, message: str) -> Notice:
    return Notice(NoticeKind.SUCCESS, title, message)


def failure(title: str, message: str) -> Notice:
    return Notice(NoticeKind.ERROR, title, message)


def announce[T, E](
    action: LazyCoroResult[T, E],
    notifier: Notifier,
    on_ok: Callable[[T], Notice] | None = None,
    error_title: str = "Error",
) -> LazyCoroResult[T, E]:
    """Attach success/error feedback to a user-facing action."""

    def ok(value: T) -> None:
        if on_ok is not None:
            notifier.notify(on_ok(value))

    def err(e: E) -> None:
        notifier.notify(failure(error_title, str(e)))

    return flow(action).tap(ok).tap_err(err).compile()


__all__ = (
    "NoticeKind",
    "Notice",
    "Notifier",
    "LoggingNotifier",
    "success",
    "failure",
    "announce",
)
