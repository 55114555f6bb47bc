"""
In-memory store — process-local backend with fault injection.

    store = InMemoryCatalogStore(fail_on={"insert_transaction_items"})
    await store.insert_transaction_items(tid, drafts)  # Error(StoreError(...))

Every call is recorded in `calls`, so tests can assert which requests
a component issued.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from decimal import Decimal

from kungfu import Result, Ok, Error

from bookify._log import get_logger
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
from bookify.store._types import StoreError

log = get_logger("store.memory")


def utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryCatalogStore:
    """
    Dict-backed CatalogStore.

    fail_on: operation names (method names) that return an injected
    StoreError instead of doing anything. Mutable, so a test can heal
    the store between calls.
    """

    def __init__(
        self,
        books: Iterable[Book] = (),
        *,
        fail_on: Iterable[str] = (),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.fail_on: set[str] = set(fail_on)
        self.calls: list[str] = []
        self._clock = clock
        self._seq = 0
        self._books: dict[BookId, Book] = {}
        self._book_seq: dict[BookId, int] = {}
        self._headers: dict[TransactionId, TransactionHeader] = {}
        self._header_seq: dict[TransactionId, int] = {}
        self._items: dict[TransactionId, list[TransactionItemDraft]] = {}
        for book in books:
            self._put_book(book)

    # ── helpers ─────────────────────────────────────────

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _fault(self, operation: str) -> Error[StoreError] | None:
        self.calls.append(operation)
        if operation in self.fail_on:
            return Error(StoreError(operation, "injected failure"))
        return None

    def _put_book(self, book: Book) -> None:
        if book.id not in self._book_seq:
            self._book_seq[book.id] = self._next_seq()
        self._books[book.id] = book

    @property
    def headers(self) -> list[TransactionHeader]:
        """Every stored header, orphans included."""
        return list(self._headers.values())

    # ── books ───────────────────────────────────────────

    async def list_books(self) -> Result[list[Book], StoreError]:
        if (failure := self._fault("list_books")) is not None:
            return failure
        books = sorted(
            self._books.values(),
            key=lambda b: (b.created_at, self._book_seq[b.id]),
            reverse=True,
        )
        return Ok(books)

    async def insert_book(self, draft: BookDraft) -> Result[Book, StoreError]:
        if (failure := self._fault("insert_book")) is not None:
            return failure
        book = Book(
            id=BookId(uuid.uuid4().hex),
            title=draft.title,
            author=draft.author,
            price=draft.price,
            cover_url=draft.cover_url,
            description=draft.description,
            category=draft.category,
            stock=draft.stock,
            created_at=self._clock(),
        )
        self._put_book(book)
        return Ok(book)

    async def update_book(
        self, book_id: BookId, patch: BookPatch
    ) -> Result[None, StoreError]:
        if (failure := self._fault("update_book")) is not None:
            return failure
        book = self._books.get(book_id)
        if book is None:
            return Error(StoreError("update_book", f"book {book_id} not found"))
        self._books[book_id] = patch.apply(book)
        return Ok(None)

    async def delete_book(self, book_id: BookId) -> Result[None, StoreError]:
        if (failure := self._fault("delete_book")) is not None:
            return failure
        if self._books.pop(book_id, None) is None:
            return Error(StoreError("delete_book", f"book {book_id} not found"))
        del self._book_seq[book_id]
        return Ok(None)

    # ── transactions ────────────────────────────────────

    async def insert_transaction_header(
        self, total_price: Decimal
    ) -> Result[TransactionHeader, StoreError]:
        if (failure := self._fault("insert_transaction_header")) is not None:
            return failure
        header = TransactionHeader(
            id=TransactionId(uuid.uuid4().hex),
            created_at=self._clock(),
            total_price=total_price,
        )
        self._headers[header.id] = header
        self._header_seq[header.id] = self._next_seq()
        return Ok(header)

    async def insert_transaction_items(
        self,
        transaction_id: TransactionId,
        items: list[TransactionItemDraft],
    ) -> Result[list[TransactionItem], StoreError]:
        if (failure := self._fault("insert_transaction_items")) is not None:
            return failure
        if transaction_id not in self._headers:
            return Error(StoreError(
                "insert_transaction_items",
                f"transaction {transaction_id} not found",
            ))
        self._items.setdefault(transaction_id, []).extend(items)
        return Ok([self._join(draft) for draft in items])

    async def delete_transaction_header(
        self, transaction_id: TransactionId
    ) -> Result[None, StoreError]:
        if (failure := self._fault("delete_transaction_header")) is not None:
            return failure
        if self._headers.pop(transaction_id, None) is None:
            return Error(StoreError(
                "delete_transaction_header",
                f"transaction {transaction_id} not found",
            ))
        del self._header_seq[transaction_id]
        self._items.pop(transaction_id, None)
        return Ok(None)

    async def list_transactions(self) -> Result[list[Transaction], StoreError]:
        if (failure := self._fault("list_transactions")) is not None:
            return failure
        headers = sorted(
            self._headers.values(),
            key=lambda h: (h.created_at, self._header_seq[h.id]),
            reverse=True,
        )
        transactions: list[Transaction] = []
        for header in headers:
            drafts = self._items.get(header.id)
            if not drafts:
                log.warning("orphaned_transaction_header", transaction_id=str(header.id))
                continue
            transactions.append(
                Transaction.from_header(header, [self._join(d) for d in drafts])
            )
        return Ok(transactions)

    def _join(self, draft: TransactionItemDraft) -> TransactionItem:
        return TransactionItem(
            book_id=draft.book_id,
            quantity=draft.quantity,
            price_at_purchase=draft.price,
            book=self._books.get(draft.book_id),
        )

    async def close(self) -> None:
        self.calls.append("close")


__all__ = ("InMemoryCatalogStore", "utcnow")
