"""
bookify — cart, catalog and checkout core of a book storefront.

    from bookify import ledger   # Cart Ledger
    from bookify import catalog  # Catalog Cache
    from bookify import checkout # Checkout Coordinator, Transaction History
    from bookify import store    # Remote Catalog Store backends
    from bookify import saga as S
"""

from bookify import saga
from bookify import lift
from bookify import store
from bookify import ledger
from bookify import catalog
from bookify import checkout
from bookify._errors import (
    InvalidQuantity,
    BookNotFound,
    InvalidBook,
    InconsistentTotal,
    CheckoutFailed,
    RollbackFailed,
)
from bookify._log import configure_logging
from bookify._types import (
    BookId,
    TransactionId,
    Category,
    Book,
    BookDraft,
    BookPatch,
    TransactionHeader,
    TransactionItemDraft,
    TransactionItem,
    Transaction,
)
from bookify.config import Settings
from bookify.session import Session

__version__ = "0.1.0"

__all__ = (
    "saga",
    "lift",
    "store",
    "ledger",
    "catalog",
    "checkout",
    "InvalidQuantity",
    "BookNotFound",
    "InvalidBook",
    "InconsistentTotal",
    "CheckoutFailed",
    "RollbackFailed",
    "configure_logging",
    "BookId",
    "TransactionId",
    "Category",
    "Book",
    "BookDraft",
    "BookPatch",
    "TransactionHeader",
    "TransactionItemDraft",
    "TransactionItem",
    "Transaction",
    "Settings",
    "Session",
)
