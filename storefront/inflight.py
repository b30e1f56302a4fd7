"""
In-flight guard — one pending run per key.

A second submission of the same action (same user placing an order, same
order changing status) while the first is pending either fails fast with
DuplicateSubmission (FAIL) or shares the first run's result (WAIT).

    guard = InFlightGuard()
    result = await guard.run(f"place:{user.id}", place(...))
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto

from kungfu import LazyCoroResult, Result, Error

from storefront.errors import DuplicateSubmission

log = logging.getLogger("storefront.inflight")


class OnPending(Enum):
    """
    What to do when a run arrives while another with the same key is pending.

    FAIL: Immediately return DuplicateSubmission.
    WAIT: Await the pending run and return its result.
    """

    FAIL = auto()
    WAIT = auto()


class InFlightGuard:
    def __init__(self, on_pending: OnPending = OnPending.FAIL) -> None:
        self._on_pending = on_pending
        self._pending: dict[str, asyncio.Future[Result[object, object]]] = {}

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def run[T, E](
        self,
        key: str,
        action: LazyCoroResult[T, E],
    ) -> LazyCoroResult[T, E | DuplicateSubmission]:
        pending = self._pending
        on_pending = self._on_pending

        async def execute() -> Result[T, E | DuplicateSubmission]:
            existing = pending.get(key)
            if existing is not None:
                if on_pending is OnPending.FAIL:
                    log.info("rejected duplicate submission %s", key)
                    return Error(DuplicateSubmission(key))
                return await asyncio.shield(existing)  # type: ignore[return-value]

            done: asyncio.Future[Result[object, object]] = (
                asyncio.get_running_loop().create_future()
            )
            pending[key] = done
            try:
                result = await action
                done.set_result(result)  # type: ignore[arg-type]
                return result
            except asyncio.CancelledError:
                done.cancel()
                raise
            except Exception as exc:
                done.set_exception(exc)
                # marks it retrieved; nobody awaits the future in FAIL mode
                done.exception()
                raise
            finally:
                del pending[key]

        return LazyCoroResult(execute)


__all__ = ("OnPending", "InFlightGuard")
