"""
Saga — sequential steps with compensation.

    from storefront import saga as S

    saga = S.step(action, compensate).then(lambda v: S.step(action2, compensate2))
    result = await S.run(saga)
"""

from __future__ import annotations

from storefront.saga._types import (
    Compensator,
    SagaStep,
    SagaExpr,
    SagaResult,
    SagaError,
    Then,
    step,
)
from storefront.saga._run import run

__all__ = (
    "Compensator",
    "SagaStep",
    "SagaExpr",
    "SagaResult",
    "SagaError",
    "Then",
    "step",
    "run",
)
