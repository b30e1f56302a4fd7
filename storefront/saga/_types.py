"""
Saga types — steps, chains and outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable, Awaitable
from kungfu import LazyCoroResult

type Compensator[T] = Callable[[T], Awaitable[None]]
"""Undo for a step; receives the value the step produced."""

# ═══════════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaStep[T, E]:
    """
    One action plus the undo for it.

    The undo is recorded only once the action succeeds; a later failure
    replays recorded undos newest first.
    """

    action: LazyCoroResult[T, E]
    compensate: Compensator[T] | None
    name: str = "step"

    def then[U, E2](self, f: Callable[[T], SagaStep[U, E2]]) -> Then[T, U, E, E2]:
        return Then(self, f)


@dataclass(frozen=True, slots=True)
class Then[T, U, E, E2]:
    """f runs on the value of inner; inner may itself be a chain."""

    inner: SagaStep[T, E] | Then[object, T, object, E]
    f: Callable[[T], SagaStep[U, E2]]

    def then[V, E3](self, g: Callable[[U], SagaStep[V, E3]]) -> Then[U, V, E | E2, E3]:
        return Then(self, g)  # type: ignore[arg-type]


type SagaExpr[T, E] = SagaStep[T, E] | Then[object, T, object, E]


def step[T, E](
    action: LazyCoroResult[T, E],
    compensate: Compensator[T] | None = None,
    *,
    name: str = "step",
) -> SagaStep[T, E]:
    """
    Example:
        from storefront import saga as S

        place = S.step(writer.create(draft), compensate=writer.void, name="create_order").then(
            lambda order: S.step(cart.clear(order.user_id), name="clear_cart")
        )
    """
    return SagaStep(action=action, compensate=compensate, name=name)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaResult[T]:
    value: T
    steps_executed: int
    compensators_recorded: int


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """
    Failure of one step, with what the rollback managed.

    step_failed is 1-based. An incomplete rollback means some side effect
    of an earlier step is still in place.
    """

    error: E
    step_failed: int
    compensators_run: int
    compensators_failed: int

    @property
    def rollback_complete(self) -> bool:
        return self.compensators_failed == 0


__all__ = (
    "Compensator",
    "SagaStep",
    "Then",
    "SagaExpr",
    "step",
    "SagaResult",
    "SagaError",
)
