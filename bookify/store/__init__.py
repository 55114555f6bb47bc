"""
Store — the Remote Catalog Store contract and its backends.

    from bookify import store

    backend = store.InMemoryCatalogStore(fail_on={"insert_transaction_items"})
    durable = await store.SqlCatalogStore.connect("sqlite+aiosqlite:///books.db")
"""

from __future__ import annotations

from bookify.store._types import CatalogStore, StoreError
from bookify.store._memory import InMemoryCatalogStore, utcnow
from bookify.store._sqlalchemy import SqlCatalogStore, to_cents, from_cents
from bookify.store._seed import SEED_BOOKS, seed_if_empty

__all__ = (
    "CatalogStore",
    "StoreError",
    "InMemoryCatalogStore",
    "SqlCatalogStore",
    "SEED_BOOKS",
    "seed_if_empty",
    "utcnow",
    "to_cents",
    "from_cents",
)
