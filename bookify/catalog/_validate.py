"""
Book validation for the add-book and edit-book forms.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from bookify._errors import InvalidBook
from bookify._types import BookDraft, BookPatch, Category

_REQUIRED = ("title", "author", "cover_url", "description")
_TEXT = (*_REQUIRED, "category")


# ═══════════════════════════════════════════════════════════════════════════════
# Field rules
# ═══════════════════════════════════════════════════════════════════════════════


def _check_required(field: str, value: str) -> None:
    if not value.strip():
        raise InvalidBook(field, "is required")


def _check_price(price: Decimal) -> None:
    if not isinstance(price, Decimal) or not price.is_finite():
        raise InvalidBook("price", "must be a decimal amount")
    if price <= 0:
        raise InvalidBook("price", "must be greater than zero")
    # Whole cents only
    if price != price.quantize(Decimal("0.01")):
        raise InvalidBook("price", "must have at most two decimal places")


def _check_stock(stock: int) -> None:
    if not isinstance(stock, int) or isinstance(stock, bool) or stock < 0:
        raise InvalidBook("stock", "must be a non-negative integer")


def _check_category(category: str) -> None:
    _check_required("category", category)
    if category.strip() == Category.ALL:
        raise InvalidBook("category", f"{Category.ALL!r} is a filter, not a category")


# ═══════════════════════════════════════════════════════════════════════════════
# Drafts and patches
# ═══════════════════════════════════════════════════════════════════════════════


def validate_draft(draft: BookDraft) -> BookDraft:
    """
    Check a draft and return it with text fields stripped.

    Raises InvalidBook for the first offending field.
    """
    for field in _REQUIRED:
        _check_required(field, getattr(draft, field))
    _check_price(draft.price)
    _check_stock(draft.stock)
    _check_category(draft.category)

    return replace(draft, **{field: getattr(draft, field).strip() for field in _TEXT})


def validate_patch(patch: BookPatch) -> BookPatch:
    """Same rules as validate_draft, applied to the fields a patch sets."""
    changes = patch.changes()

    for field in _REQUIRED:
        if field in changes:
            _check_required(field, changes[field])  # type: ignore[arg-type]
    if "price" in changes:
        _check_price(changes["price"])  # type: ignore[arg-type]
    if "stock" in changes:
        _check_stock(changes["stock"])  # type: ignore[arg-type]
    if "category" in changes:
        _check_category(changes["category"])  # type: ignore[arg-type]

    return replace(patch, **{
        field: changes[field].strip()  # type: ignore[attr-defined]
        for field in _TEXT
        if field in changes
    })


__all__ = ("validate_draft", "validate_patch")
