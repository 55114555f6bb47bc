"""
Transaction History — committed purchases, newest first.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import Result, Ok, Error

from bookify._log import get_logger
from bookify._types import Transaction
from bookify.store._types import CatalogStore, StoreError

log = get_logger("history")


class TransactionHistory:
    def __init__(self, entries: list[Transaction] | None = None) -> None:
        self._entries: list[Transaction] = list(entries or [])

    def prepend(self, transaction: Transaction) -> None:
        self._entries.insert(0, transaction)

    @property
    def entries(self) -> list[Transaction]:
        return list(self._entries)

    @property
    def latest(self) -> Transaction | None:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    async def load(self, store: CatalogStore) -> Result[list[Transaction], StoreError]:
        """Replace the history wholesale with the store's list."""
        match await store.list_transactions():
            case Ok(transactions):
                self._entries = list(transactions)
                log.info("history_loaded", count=len(transactions))
                return Ok(self.entries)
            case Error(e):
                log.warning("history_load_failed", error=str(e))
                return Error(e)

    def total_spent(self) -> Decimal:
        return sum((t.total_price for t in self._entries), Decimal(0))

    def total_purchases(self) -> int:
        """Number of books bought across all transactions."""
        return sum(t.item_count for t in self._entries)


__all__ = ("TransactionHistory",)
