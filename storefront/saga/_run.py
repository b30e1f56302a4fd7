"""
Saga execution with automatic rollback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from kungfu import Result, Ok, Error

from storefront.saga._types import (
    SagaStep,
    SagaExpr,
    SagaResult,
    SagaError,
    Then,
    Compensator,
)

log = logging.getLogger("storefront.saga")

# ═══════════════════════════════════════════════════════════════════════════════
# Trail — what ran so far
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class _Trail:
    compensators: list[tuple[str, object, Compensator[object]]] = field(
        default_factory=list
    )
    steps: int = 0


async def _execute(expr: SagaExpr[object, object], trail: _Trail) -> Result[object, object]:
    match expr:
        case SagaStep(action=action, compensate=compensate, name=name):
            trail.steps += 1
            result = await action
            match result:
                case Ok(value):
                    if compensate is not None:
                        trail.compensators.append((name, value, compensate))
                    log.debug("saga step %s ok", name)
                case Error(e):
                    log.info("saga step %s failed: %s", name, e)
            return result
        case Then(inner=inner, f=f):
            result = await _execute(inner, trail)
            match result:
                case Ok(value):
                    return await _execute(f(value), trail)
                case Error(_):
                    return result
    raise TypeError(f"not a saga expression: {expr!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# Rollback
# ═══════════════════════════════════════════════════════════════════════════════


async def _rollback(trail: _Trail) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0

    for name, value, comp in reversed(trail.compensators):
        try:
            await comp(value)
            comp_run += 1
        except Exception:
            comp_failed += 1
            log.exception("compensation for %s failed", name)

    return comp_run, comp_failed


# ═══════════════════════════════════════════════════════════════════════════════
# run()
# ═══════════════════════════════════════════════════════════════════════════════


async def run[T, E](saga: SagaExpr[T, E]) -> Result[SagaResult[T], SagaError[E]]:
    """
    Execute a step or chain with automatic rollback on failure.

    Example:
        result = await S.run(place_order)

        match result:
            case Ok(r):
                order = r.value
            case Error(e):
                cause = e.error
    """
    trail = _Trail()
    result = await _execute(saga, trail)  # type: ignore[arg-type]

    match result:
        case Ok(value):
            return Ok(SagaResult(
                value=value,  # type: ignore[arg-type]
                steps_executed=trail.steps,
                compensators_recorded=len(trail.compensators),
            ))
        case Error(error):
            comp_run, comp_failed = await _rollback(trail)
            return Error(SagaError(
                error=error,  # type: ignore[arg-type]
                step_failed=trail.steps,
                compensators_run=comp_run,
                compensators_failed=comp_failed,
            ))


__all__ = ("run",)
