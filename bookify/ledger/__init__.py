"""
Ledger — the shopping cart.

    from bookify import ledger

    cart = ledger.CartLedger()
    cart.add_to_cart(book_id, 2)
    total = cart.total(catalog)
"""

from __future__ import annotations

from bookify.ledger._ledger import CartLine, CartLedger, PriceSource

__all__ = ("CartLine", "CartLedger", "PriceSource")
