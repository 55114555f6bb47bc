"""
Catalog — cached book list with write-through edits.

    from bookify import catalog

    books = catalog.CatalogCache(store)
    await books.refresh()
    kids = books.by_category("Child")
"""

from __future__ import annotations

from bookify.catalog._cache import CatalogCache
from bookify.catalog._query import search, by_category, clamp_quantity
from bookify.catalog._validate import validate_draft, validate_patch

__all__ = (
    "CatalogCache",
    "search",
    "by_category",
    "clamp_quantity",
    "validate_draft",
    "validate_patch",
)
