"""
Demo catalog inserted into an empty store.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import Result, Ok, Error

from bookify._log import get_logger
from bookify._types import Book, BookDraft, Category
from bookify.store._types import CatalogStore, StoreError

log = get_logger("store.seed")


SEED_BOOKS: tuple[BookDraft, ...] = (
    BookDraft(
        title="The Giant Kingdom",
        author="John Smith",
        price=Decimal("29.99"),
        cover_url="https://images.unsplash.com/photo-1544947950-fa07a98d237f?w=400",
        description="Extracurricular reading / Growing motivational story book",
        category=Category.CHILD,
        stock=261,
    ),
    BookDraft(
        title="Bear's Wish",
        author="Emily Brown",
        price=Decimal("24.99"),
        cover_url="https://images.unsplash.com/photo-1512820790803-83ca734da794?w=400",
        description="Extracurricular reading / Child education story",
        category=Category.CHILD,
        stock=261,
    ),
    BookDraft(
        title="Animal Adventures",
        author="Michael Green",
        price=Decimal("34.99"),
        cover_url="https://images.unsplash.com/photo-1543002588-bfa74002ed7e?w=400",
        description="Extracurricular reading / Growing motivational story book",
        category=Category.CHILD,
        stock=261,
    ),
)


async def seed_if_empty(
    store: CatalogStore,
    drafts: tuple[BookDraft, ...] = SEED_BOOKS,
) -> Result[list[Book], StoreError]:
    """
    Insert drafts when the store holds no books.

    Returns the inserted books; an empty list when the store already had some.
    Stops at the first failed insert.
    """
    match await store.list_books():
        case Error(e):
            return Error(e)
        case Ok(existing) if existing:
            return Ok([])

    inserted: list[Book] = []
    for draft in drafts:
        match await store.insert_book(draft):
            case Ok(book):
                inserted.append(book)
            case Error(e):
                return Error(e)

    log.info("catalog_seeded", count=len(inserted))
    return Ok(inserted)


__all__ = ("SEED_BOOKS", "seed_if_empty")
