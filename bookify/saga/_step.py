"""
Saga step creation.
"""

from __future__ import annotations

from kungfu import LazyCoroResult

from bookify.saga._types import SagaStep, CompensatorWithValue

# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    action: LazyCoroResult[T, E],
    compensate: CompensatorWithValue[T] | None = None,
    name: str = "step",
) -> SagaStep[T, E]:
    """
    Create a compensated saga step.

    Args:
        action: The operation to perform (LazyCoroResult)
        compensate: The compensation action if rollback needed
        name: Label used in logs and in SagaError.step_name

    Returns:
        SagaStep that can be chained with .then()

    Example:
        from bookify import saga as S
        from bookify import lift

        header = S.step(
            action=lift.from_store(
                "insert_transaction_header",
                lambda: store.insert_transaction_header(total),
            ),
            compensate=lambda h: discard(h.id),
            name="insert_transaction_header",
        )

        checkout = header.then(lambda h: S.step(
            action=lift.from_store(
                "insert_transaction_items",
                lambda: store.insert_transaction_items(h.id, drafts),
            ),
            name="insert_transaction_items",
        ))
    """
    return SagaStep(action=action, compensate=compensate, name=name)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("step",)
