"""
Lift — Helpers for lifting store calls into LazyCoroResult.

Re-exports from combinators.lift with bookify-specific additions.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

from kungfu import LazyCoroResult, Result, Ok, Error

# Re-export from combinators.lift
from combinators.lift import fail

from bookify.store._types import StoreError


# ═══════════════════════════════════════════════════════════════════════════════
# bookify-specific helpers
# ═══════════════════════════════════════════════════════════════════════════════


def from_store[T](
    operation: str,
    call: Callable[[], Awaitable[Result[T, StoreError]]],
) -> LazyCoroResult[T, StoreError]:
    """
    Lazy store call.

    Store methods already report expected failures as Error(StoreError);
    anything they raise is turned into a StoreError for the same operation.

    Example:
        header = from_store(
            "insert_transaction_header",
            lambda: store.insert_transaction_header(total),
        )
        result = await header
    """
    async def _run() -> Result[T, StoreError]:
        try:
            result = await call()
        except Exception as exc:
            return Error(StoreError(operation, str(exc), exc))
        match result:
            case Ok(value):
                return Ok(value)
            case Error(e):
                return Error(e)

    return LazyCoroResult(_run)


__all__ = (
    # From combinators.lift
    "fail",
    # bookify additions
    "from_store",
)
