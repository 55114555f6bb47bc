"""
Saga execution with automatic rollback.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from bookify._log import get_logger
from bookify.saga._types import (
    SagaStep,
    SagaResult,
    SagaError,
    Then,
    CompensatorWithValue,
)

log = get_logger("saga")

# ═══════════════════════════════════════════════════════════════════════════════
# Recorded Compensator
# ═══════════════════════════════════════════════════════════════════════════════

type RecordedCompensator[T] = tuple[str, T, CompensatorWithValue[T]]

# ═══════════════════════════════════════════════════════════════════════════════
# run_step() — Execute single step
# ═══════════════════════════════════════════════════════════════════════════════


async def run_step[T, E](
    step: SagaStep[T, E],
    compensators: list[RecordedCompensator[T]],
) -> Result[T, E]:
    """Execute single step, recording compensator on success."""
    result = await step.action
    match result:
        case Ok(value):
            if step.compensate is not None:
                compensators.append((step.name, value, step.compensate))
            log.debug("saga_step_completed", step=step.name)
            return Ok(value)
        case Error(e):
            log.warning("saga_step_failed", step=step.name, error=str(e))
            return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# run_compensators() — Rollback
# ═══════════════════════════════════════════════════════════════════════════════


async def run_compensators[T](
    compensators: list[RecordedCompensator[T]],
) -> tuple[int, list[Exception]]:
    """Run compensators in reverse. Returns (run, errors raised)."""
    comp_run = 0
    errors: list[Exception] = []

    for name, value, comp in reversed(compensators):
        try:
            await comp(value)
            comp_run += 1
            log.info("compensation_completed", step=name)
        except Exception as exc:
            errors.append(exc)
            log.error("compensation_failed", step=name, error=str(exc))

    return comp_run, errors


def _saga_error[E](
    error: E,
    step_failed: int,
    step_name: str,
    comp_run: int,
    comp_errors: list[Exception],
) -> SagaError[E]:
    return SagaError(
        error=error,
        step_failed=step_failed,
        step_name=step_name,
        compensators_run=comp_run,
        compensators_failed=len(comp_errors),
        compensation_errors=tuple(comp_errors),
        rollback_complete=not comp_errors,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# run_chain() — Execute Then chain
# ═══════════════════════════════════════════════════════════════════════════════


async def run_chain[T, U, E, E2](
    chain: Then[T, U, E, E2],
) -> Result[SagaResult[U], SagaError[E | E2]]:
    """
    Execute chained saga steps.

    Runs inner step, then applies f to get next step, and runs that.
    On any failure, compensators run in reverse.
    """
    compensators_t: list[RecordedCompensator[T]] = []
    compensators_u: list[RecordedCompensator[U]] = []
    steps = 0

    # Run inner step
    inner_result = await run_step(chain.inner, compensators_t)
    steps += 1

    match inner_result:
        case Ok(value):
            next_step = chain.f(value)

            next_result = await run_step(next_step, compensators_u)
            steps += 1

            match next_result:
                case Ok(final_value):
                    return Ok(SagaResult(
                        value=final_value,
                        steps_executed=steps,
                        compensators_recorded=len(compensators_t) + len(compensators_u),
                    ))

                case Error(e):
                    # Rollback next compensators first, then inner
                    comp_run1, comp_errors1 = await run_compensators(compensators_u)
                    comp_run2, comp_errors2 = await run_compensators(compensators_t)

                    return Error(_saga_error(
                        e,
                        steps,
                        next_step.name,
                        comp_run1 + comp_run2,
                        comp_errors1 + comp_errors2,
                    ))

        case Error(e):
            comp_run, comp_errors = await run_compensators(compensators_t)
            return Error(_saga_error(e, steps, chain.inner.name, comp_run, comp_errors))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("run_chain", "run_step", "run_compensators")
