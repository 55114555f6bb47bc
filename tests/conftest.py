from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
import structlog

from bookify import Book, BookDraft, BookId, Category
from bookify.catalog import CatalogCache
from bookify.checkout import CheckoutCoordinator, TransactionHistory
from bookify.ledger import CartLedger
from bookify.store import InMemoryCatalogStore

T0 = datetime(2025, 1, 1, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


class TickingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime = T0) -> None:
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def make_book(
    book_id: str,
    price: str,
    *,
    title: str | None = None,
    author: str = "Anon",
    category: str = Category.CHILD,
    description: str = "",
    stock: int = 10,
    created_at: datetime = T0,
) -> Book:
    return Book(
        id=BookId(book_id),
        title=title or f"Book {book_id}",
        author=author,
        price=Decimal(price),
        cover_url=f"https://example.com/{book_id}.jpg",
        description=description,
        category=category,
        stock=stock,
        created_at=created_at,
    )


def make_draft(**overrides: object) -> BookDraft:
    fields: dict[str, object] = {
        "title": "Rust in Action",
        "author": "Tim McNamara",
        "price": Decimal("39.50"),
        "cover_url": "https://example.com/rust.jpg",
        "description": "Systems programming",
        "category": Category.TECHNOLOGY,
        "stock": 5,
    }
    fields.update(overrides)
    return BookDraft(**fields)  # type: ignore[arg-type]


@pytest.fixture
def book1() -> Book:
    return make_book("book-1", "10.00", created_at=T0)


@pytest.fixture
def book2() -> Book:
    return make_book("book-2", "5.00", created_at=T0 + timedelta(minutes=1))


@pytest.fixture
def store(book1: Book, book2: Book) -> InMemoryCatalogStore:
    return InMemoryCatalogStore([book1, book2], clock=TickingClock(T0 + timedelta(hours=1)))


@pytest.fixture
async def catalog(store: InMemoryCatalogStore) -> CatalogCache:
    cache = CatalogCache(store)
    await cache.refresh()
    store.calls.clear()
    return cache


@pytest.fixture
def ledger() -> CartLedger:
    return CartLedger()


@pytest.fixture
def history() -> TransactionHistory:
    return TransactionHistory()


@pytest.fixture
def coordinator(
    store: InMemoryCatalogStore,
    ledger: CartLedger,
    catalog: CatalogCache,
    history: TransactionHistory,
) -> CheckoutCoordinator:
    return CheckoutCoordinator(store, ledger, catalog, history)
