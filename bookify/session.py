"""
Session — one application session's worth of state.

    async with Session.open(Settings.from_env()) as session:
        session.ledger.add_to_cart(book.id, 2)
        result = await session.checkout()

No module-level state: everything a screen needs hangs off the Session
it was handed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from kungfu import Result, Ok, Error

from bookify._errors import CheckoutFailed
from bookify._log import get_logger
from bookify._types import BookId, Transaction
from bookify.catalog._cache import CatalogCache
from bookify.checkout._coordinator import CheckoutCoordinator
from bookify.checkout._history import TransactionHistory
from bookify.config import Settings
from bookify.ledger._ledger import CartLedger
from bookify.store._memory import InMemoryCatalogStore
from bookify.store._seed import seed_if_empty
from bookify.store._sqlalchemy import SqlCatalogStore
from bookify.store._types import CatalogStore, StoreError

log = get_logger("session")


async def build_store(settings: Settings) -> CatalogStore:
    match settings.store:
        case "sql":
            return await SqlCatalogStore.connect(settings.database_url)
        case _:
            return InMemoryCatalogStore()


class Session:
    """Ledger, catalog, history and coordinator over a single store."""

    def __init__(self, store: CatalogStore) -> None:
        self.store = store
        self.ledger = CartLedger()
        self.catalog = CatalogCache(store)
        self.history = TransactionHistory()
        self.coordinator = CheckoutCoordinator(store, self.ledger, self.catalog, self.history)

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        settings: Settings | None = None,
        *,
        store: CatalogStore | None = None,
    ) -> AsyncIterator[Session]:
        """
        Configure logging, build the configured store, seed it if asked,
        warm the catalog and history. The store is closed on exit.

        store: use this backend instead of the one settings describe.

        Raises StoreError when seeding or the first catalog refresh fails.
        A failed history load is logged and leaves the history empty.
        """
        settings = settings or Settings()
        settings.apply_logging()
        if store is None:
            store = await build_store(settings)
        session = cls(store)
        try:
            await session.start(seed=settings.seed_catalog)
            log.info("session_opened", store=settings.store)
            yield session
        finally:
            await session.close()

    async def start(self, *, seed: bool = False) -> None:
        if seed:
            match await seed_if_empty(self.store):
                case Error(e):
                    raise e

        match await self.catalog.refresh():
            case Error(e):
                raise e

        await self.history.load(self.store)

    async def close(self) -> None:
        await self.store.close()
        log.info("session_closed")

    # ── operations spanning components ──────────────────

    async def delete_book(self, book_id: BookId) -> Result[None, StoreError]:
        """Delete from store and catalog, then drop the book's cart line."""
        match await self.catalog.delete_book(book_id):
            case Ok(_):
                self.ledger.remove_from_cart(book_id)
                return Ok(None)
            case Error(e):
                return Error(e)

    async def checkout(self) -> Result[Transaction | None, CheckoutFailed]:
        return await self.coordinator.checkout()


__all__ = ("Session", "build_store")
