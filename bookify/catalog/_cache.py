"""
Catalog Cache — in-memory mirror of the store's books.

Reads are synchronous and served from memory. Writes go to the store
first; the cache changes only when the store call succeeded.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import Result, Ok, Error

from bookify._errors import BookNotFound, InvalidBook
from bookify._log import get_logger
from bookify._types import Book, BookDraft, BookId, BookPatch
from bookify.catalog import _query
from bookify.catalog._validate import validate_draft, validate_patch
from bookify.store._types import CatalogStore, StoreError

log = get_logger("catalog")


class CatalogCache:
    """
    Ordered book list (store order, newest first) plus an id index.

    Example:
        catalog = CatalogCache(store)
        await catalog.refresh()
        price = catalog.price_of(book_id)
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store
        self._books: list[Book] = []
        self._index: dict[BookId, Book] = {}

    def _replace(self, books: list[Book]) -> None:
        self._books = list(books)
        self._index = {book.id: book for book in self._books}

    # ── refresh ─────────────────────────────────────────

    async def refresh(self) -> Result[list[Book], StoreError]:
        """Replace the cache wholesale with the store's list."""
        match await self._store.list_books():
            case Ok(books):
                self._replace(books)
                log.info("catalog_refreshed", count=len(books))
                return Ok(self.books)
            case Error(e):
                log.warning("catalog_refresh_failed", error=str(e))
                return Error(e)

    # ── reads ───────────────────────────────────────────

    @property
    def books(self) -> list[Book]:
        return list(self._books)

    def by_id(self, book_id: BookId) -> Book | None:
        return self._index.get(book_id)

    def get(self, book_id: BookId) -> Book:
        book = self._index.get(book_id)
        if book is None:
            raise BookNotFound(book_id)
        return book

    def price_of(self, book_id: BookId) -> Decimal:
        return self.get(book_id).price

    def search(self, query: str) -> list[Book]:
        return _query.search(self._books, query)

    def by_category(self, category: str) -> list[Book]:
        return _query.by_category(self._books, category)

    def clamp_quantity(self, book_id: BookId, requested: int) -> int:
        return _query.clamp_quantity(self.get(book_id), requested)

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._index

    # ── write-through ───────────────────────────────────

    async def add_book(self, draft: BookDraft) -> Result[Book, StoreError | InvalidBook]:
        try:
            draft = validate_draft(draft)
        except InvalidBook as e:
            return Error(e)

        match await self._store.insert_book(draft):
            case Ok(book):
                self._replace([book, *self._books])
                log.info("book_added", book_id=str(book.id), title=book.title)
                return Ok(book)
            case Error(e):
                return Error(e)

    async def update_book(
        self, book_id: BookId, patch: BookPatch
    ) -> Result[Book | None, StoreError | InvalidBook]:
        """Returns the patched cached book, or None if it was not cached."""
        try:
            patch = validate_patch(patch)
        except InvalidBook as e:
            return Error(e)

        match await self._store.update_book(book_id, patch):
            case Ok(_):
                current = self._index.get(book_id)
                if current is None:
                    return Ok(None)
                updated = patch.apply(current)
                self._replace([updated if b.id == book_id else b for b in self._books])
                log.info("book_updated", book_id=str(book_id), fields=sorted(patch.changes()))
                return Ok(updated)
            case Error(e):
                return Error(e)

    async def delete_book(self, book_id: BookId) -> Result[None, StoreError]:
        match await self._store.delete_book(book_id):
            case Ok(_):
                self._replace([b for b in self._books if b.id != book_id])
                log.info("book_deleted", book_id=str(book_id))
                return Ok(None)
            case Error(e):
                return Error(e)


__all__ = ("CatalogCache",)
