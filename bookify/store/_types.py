"""
Remote Catalog Store — request/response contract.

CatalogStore — protocol every backend implements.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from kungfu import Result

from bookify._types import (
    Book,
    BookDraft,
    BookId,
    BookPatch,
    Transaction,
    TransactionHeader,
    TransactionId,
    TransactionItem,
    TransactionItemDraft,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StoreError(Exception):
    """Storage operation error."""

    operation: str
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        return f"{self.operation}: {self.message}"


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol — Result-based
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogStore(Protocol):
    """
    Backing persistence for books and transactions.

    Implementations: InMemoryCatalogStore, SqlCatalogStore.

    Transactions are written in two steps (header, then items); the store
    gives no atomicity across those requests, so callers undo a header
    with delete_transaction_header when the items write fails.
    """

    async def list_books(self) -> Result[list[Book], StoreError]:
        """All books, newest first."""
        ...

    async def insert_book(self, draft: BookDraft) -> Result[Book, StoreError]:
        """Persist a draft. The store assigns id and created_at."""
        ...

    async def update_book(
        self, book_id: BookId, patch: BookPatch
    ) -> Result[None, StoreError]:
        ...

    async def delete_book(self, book_id: BookId) -> Result[None, StoreError]:
        ...

    async def insert_transaction_header(
        self, total_price: Decimal
    ) -> Result[TransactionHeader, StoreError]:
        ...

    async def insert_transaction_items(
        self,
        transaction_id: TransactionId,
        items: list[TransactionItemDraft],
    ) -> Result[list[TransactionItem], StoreError]:
        ...

    async def delete_transaction_header(
        self, transaction_id: TransactionId
    ) -> Result[None, StoreError]:
        ...

    async def list_transactions(self) -> Result[list[Transaction], StoreError]:
        """Newest first, items joined to their book. Headers without items are skipped."""
        ...

    async def close(self) -> None:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("StoreError", "CatalogStore")
