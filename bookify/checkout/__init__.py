"""
Checkout — turning the cart into a persisted Transaction.

    from bookify import checkout

    coordinator = checkout.CheckoutCoordinator(store, ledger, catalog, history)
    result = await coordinator.checkout()
"""

from __future__ import annotations

from bookify.checkout._history import TransactionHistory
from bookify.checkout._coordinator import CheckoutCoordinator

__all__ = ("CheckoutCoordinator", "TransactionHistory")
