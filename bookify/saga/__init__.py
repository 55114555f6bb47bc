"""
Saga — multi-request writes with compensation.

    from bookify import saga as S

    saga = S.step(action, compensate).then(lambda v: S.step(action2))
    result = await S.run_chain(saga)
"""

from __future__ import annotations

from bookify.saga._types import (
    CompensatorWithValue,
    SagaStep,
    SagaResult,
    SagaError,
    Then,
)
from bookify.saga._step import step
from bookify.saga._run import run_chain

__all__ = (
    "CompensatorWithValue",
    "SagaStep",
    "SagaResult",
    "SagaError",
    "Then",
    "step",
    "run_chain",
)
