"""
Cart Ledger — in-memory BookId -> quantity mapping.

Synchronous, no store calls. Mutations raise InvalidQuantity on bad input and leave the ledger unchanged.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from bookify._errors import InvalidQuantity
from bookify._types import BookId

# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    book_id: BookId
    quantity: int


class PriceSource(Protocol):
    """Anything that can price a book; raises BookNotFound when it can't."""

    def price_of(self, book_id: BookId) -> Decimal:
        ...


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ═══════════════════════════════════════════════════════════════════════════════
# Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class CartLedger:
    """
    Shopping cart.

    At most one line per book; every stored quantity is a positive int.
    Lines keep insertion order.

    Example:
        ledger = CartLedger()
        ledger.add_to_cart(book_id, 2)
        ledger.update_quantity(book_id, 0)  # removes the line
    """

    def __init__(self) -> None:
        self._lines: dict[BookId, int] = {}

    # ── mutations ───────────────────────────────────────

    def add_to_cart(self, book_id: BookId, quantity: int = 1) -> None:
        if not _is_int(quantity) or quantity <= 0:
            raise InvalidQuantity(book_id, quantity)
        self._lines[book_id] = self._lines.get(book_id, 0) + quantity

    def update_quantity(self, book_id: BookId, quantity: int) -> None:
        """Overwrite a line; zero or less removes it."""
        if not _is_int(quantity):
            raise InvalidQuantity(book_id, quantity)
        if quantity <= 0:
            self._lines.pop(book_id, None)
        else:
            self._lines[book_id] = quantity

    def remove_from_cart(self, book_id: BookId) -> None:
        self._lines.pop(book_id, None)

    def clear(self) -> None:
        self._lines.clear()

    # ── reads ───────────────────────────────────────────

    def total(self, catalog: PriceSource) -> Decimal:
        """Sum of price × quantity. Raises BookNotFound for an unknown book."""
        return sum(
            (catalog.price_of(book_id) * quantity for book_id, quantity in self._lines.items()),
            Decimal(0),
        )

    def lines(self) -> list[CartLine]:
        return [CartLine(book_id, quantity) for book_id, quantity in self._lines.items()]

    def quantity_of(self, book_id: BookId) -> int:
        return self._lines.get(book_id, 0)

    def item_count(self) -> int:
        return sum(self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._lines

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines())

    def __repr__(self) -> str:
        return f"CartLedger({self._lines!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("CartLine", "CartLedger", "PriceSource")
