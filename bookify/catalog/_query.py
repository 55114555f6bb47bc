"""
Catalog queries — pure filters over a book sequence.
"""

from __future__ import annotations

from collections.abc import Iterable

from bookify._types import Book, Category


def search(books: Iterable[Book], query: str) -> list[Book]:
    """Case-insensitive substring match on title, author, category, description."""
    needle = query.strip().lower()
    if not needle:
        return list(books)
    return [
        book
        for book in books
        if needle in book.title.lower()
        or needle in book.author.lower()
        or needle in book.category.lower()
        or needle in book.description.lower()
    ]


def by_category(books: Iterable[Book], category: str) -> list[Book]:
    if category == Category.ALL:
        return list(books)
    return [book for book in books if book.category == category]


def clamp_quantity(book: Book, requested: int) -> int:
    # Out of stock still yields 0 so the stepper can disable itself
    return min(book.stock, max(1, requested))


__all__ = ("search", "by_category", "clamp_quantity")
