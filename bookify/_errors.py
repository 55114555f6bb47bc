"""
Error values.

Every error is a frozen dataclass deriving from Exception: the synchronous
layer (ledger, catalog lookups) raises them, the async layer (store calls,
checkout) carries them inside kungfu's Error(...).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bookify._types import BookId, TransactionId


# ═══════════════════════════════════════════════════════════════════════════════
# Ledger / Catalog Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class InvalidQuantity(Exception):
    book_id: BookId
    quantity: object

    def __str__(self) -> str:
        return f"invalid quantity {self.quantity!r} for book {self.book_id}"


@dataclass(frozen=True, slots=True)
class BookNotFound(Exception):
    book_id: BookId

    def __str__(self) -> str:
        return f"book {self.book_id} not found"


@dataclass(frozen=True, slots=True)
class InvalidBook(Exception):
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True, slots=True)
class InconsistentTotal(Exception):
    expected: Decimal
    actual: Decimal

    def __str__(self) -> str:
        return f"total {self.expected} does not match items sum {self.actual}"


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutFailed(Exception):
    """
    Checkout did not commit.

    The ledger and the transaction history are exactly as before the call.
    stage names the operation that failed.
    """

    stage: str
    cause: Exception | None = None

    def __str__(self) -> str:
        return f"checkout failed at {self.stage}: {self.cause}"


@dataclass(frozen=True, slots=True)
class RollbackFailed(CheckoutFailed):
    """
    Checkout failed and so did the compensating delete.

    The store keeps an orphaned transaction header with no items.
    """

    transaction_id: TransactionId | None = None
    rollback_cause: Exception | None = None

    def __str__(self) -> str:
        return (
            f"checkout failed at {self.stage}: {self.cause}; "
            f"rollback of transaction {self.transaction_id} failed: {self.rollback_cause}"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "InvalidQuantity",
    "BookNotFound",
    "InvalidBook",
    "InconsistentTotal",
    "CheckoutFailed",
    "RollbackFailed",
)
