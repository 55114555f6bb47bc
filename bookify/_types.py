"""
Core types for bookify.

Re-exports from kungfu + the storefront's domain records.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

from bookify._errors import InconsistentTotal

# ═══════════════════════════════════════════════════════════════════════════════
# IDs
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BookId:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TransactionId:
    value: str

    def __str__(self) -> str:
        return self.value


# ═══════════════════════════════════════════════════════════════════════════════
# Category — open string with well-known values
# ═══════════════════════════════════════════════════════════════════════════════


class Category:
    """Well-known category names. Any other string is accepted too."""

    ALL = "All"
    CHILD = "Child"
    EDUCATION = "Education"
    TECHNOLOGY = "Technology"


# ═══════════════════════════════════════════════════════════════════════════════
# Book Domain
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Book:
    id: BookId
    title: str
    author: str
    price: Decimal
    cover_url: str
    description: str
    category: str
    stock: int
    created_at: datetime


@dataclass(frozen=True, slots=True)
class BookDraft:
    """A book the store has not assigned an id to yet."""

    title: str
    author: str
    price: Decimal
    cover_url: str
    description: str
    category: str
    stock: int


@dataclass(frozen=True, slots=True)
class BookPatch:
    """
    Partial update of a book.

    None means "leave as is".
    """

    title: str | None = None
    author: str | None = None
    price: Decimal | None = None
    cover_url: str | None = None
    description: str | None = None
    category: str | None = None
    stock: int | None = None

    def changes(self) -> dict[str, object]:
        """Fields that are actually set."""
        return {
            f.name: value
            for f in fields(self)
            if (value := getattr(self, f.name)) is not None
        }

    def apply(self, book: Book) -> Book:
        return replace(book, **self.changes())


# ═══════════════════════════════════════════════════════════════════════════════
# Transaction Domain
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TransactionHeader:
    """First record of a two-step checkout: total only, no items yet."""

    id: TransactionId
    created_at: datetime
    total_price: Decimal


@dataclass(frozen=True, slots=True)
class TransactionItemDraft:
    book_id: BookId
    quantity: int
    price: Decimal


@dataclass(frozen=True, slots=True)
class TransactionItem:
    book_id: BookId
    quantity: int
    price_at_purchase: Decimal
    book: Book | None = None  # joined snapshot; None once the book is deleted

    @property
    def subtotal(self) -> Decimal:
        return self.price_at_purchase * self.quantity


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    Committed purchase.

    Construction checks total_price against the items; it is not
    re-verified afterwards.
    """

    id: TransactionId
    created_at: datetime
    total_price: Decimal
    items: tuple[TransactionItem, ...]

    def __post_init__(self) -> None:
        actual = sum((item.subtotal for item in self.items), Decimal(0))
        if actual != self.total_price:
            raise InconsistentTotal(expected=self.total_price, actual=actual)

    @classmethod
    def from_header(
        cls,
        header: TransactionHeader,
        items: list[TransactionItem] | tuple[TransactionItem, ...],
    ) -> Transaction:
        return cls(
            id=header.id,
            created_at=header.created_at,
            total_price=header.total_price,
            items=tuple(items),
        )

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # IDs
    "BookId",
    "TransactionId",
    # Books
    "Category",
    "Book",
    "BookDraft",
    "BookPatch",
    # Transactions
    "TransactionHeader",
    "TransactionItemDraft",
    "TransactionItem",
    "Transaction",
)
