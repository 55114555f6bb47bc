"""
Checkout Coordinator — Ledger snapshot -> persisted Transaction.

Two-step write as a saga:

    insert_transaction_header(total)      compensate: delete_transaction_header
      └─ insert_transaction_items(id, drafts)

The header total and the stored items are checked against the cart total;
any mismatch fails the checkout like a failed write. If anything after the
header fails the header is deleted again. The ledger and the history change
only after both writes succeeded and the totals agree.
"""

from __future__ import annotations

from kungfu import LazyCoroResult, Result, Ok, Error

from bookify import lift
from bookify import saga as S
from bookify._errors import (
    BookNotFound,
    CheckoutFailed,
    InconsistentTotal,
    RollbackFailed,
)
from bookify._log import get_logger
from bookify._types import (
    Transaction,
    TransactionHeader,
    TransactionItemDraft,
)
from bookify.catalog._cache import CatalogCache
from bookify.checkout._history import TransactionHistory
from bookify.ledger._ledger import CartLedger
from bookify.store._types import CatalogStore, StoreError

log = get_logger("checkout")

VERIFY_TOTAL = "verify_total"


class CheckoutCoordinator:
    """
    Example:
        coordinator = CheckoutCoordinator(store, ledger, catalog, history)

        match await coordinator.checkout():
            case Ok(None):
                ...  # cart was empty
            case Ok(transaction):
                show_receipt(transaction)
            case Error(RollbackFailed() as e):
                alert_orphan(e.transaction_id)
            case Error(e):
                retry_later(e.stage)
    """

    def __init__(
        self,
        store: CatalogStore,
        ledger: CartLedger,
        catalog: CatalogCache,
        history: TransactionHistory,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._catalog = catalog
        self._history = history

    async def _discard_header(self, header: TransactionHeader) -> None:
        match await self._store.delete_transaction_header(header.id):
            case Error(e):
                raise e
            case Ok(_):
                log.info("transaction_header_discarded", transaction_id=str(header.id))

    async def _record_items(
        self,
        header: TransactionHeader,
        drafts: list[TransactionItemDraft],
    ) -> Result[Transaction, StoreError | InconsistentTotal]:
        written = await lift.from_store(
            "insert_transaction_items",
            lambda: self._store.insert_transaction_items(header.id, drafts),
        )
        match written:
            case Error(e):
                return Error(e)
            case Ok(items):
                try:
                    return Ok(Transaction.from_header(header, items))
                except InconsistentTotal as e:
                    return Error(e)

    async def checkout(self) -> Result[Transaction | None, CheckoutFailed]:
        if self._ledger.is_empty():
            return Ok(None)

        lines = self._ledger.lines()
        try:
            drafts = [
                TransactionItemDraft(
                    book_id=line.book_id,
                    quantity=line.quantity,
                    price=self._catalog.price_of(line.book_id),
                )
                for line in lines
            ]
            total = self._ledger.total(self._catalog)
        except BookNotFound as e:
            log.warning("checkout_unresolved_book", book_id=str(e.book_id))
            return Error(CheckoutFailed("resolve_items", e))

        written: TransactionHeader | None = None

        def write_items(
            header: TransactionHeader,
        ) -> S.SagaStep[Transaction, StoreError | InconsistentTotal]:
            nonlocal written
            written = header
            if header.total_price != total:
                return S.step(
                    lift.fail(InconsistentTotal(expected=total, actual=header.total_price)),
                    name=VERIFY_TOTAL,
                )
            return S.step(
                LazyCoroResult(lambda: self._record_items(header, drafts)),
                name="insert_transaction_items",
            )

        saga = S.step(
            lift.from_store(
                "insert_transaction_header",
                lambda: self._store.insert_transaction_header(total),
            ),
            compensate=self._discard_header,
            name="insert_transaction_header",
        ).then(write_items)

        match await S.run_chain(saga):
            case Ok(result):
                transaction = result.value
                self._ledger.clear()
                self._history.prepend(transaction)
                log.info(
                    "checkout_committed",
                    transaction_id=str(transaction.id),
                    total=str(transaction.total_price),
                    items=len(transaction.items),
                )
                return Ok(transaction)

            case Error(failure):
                cause = failure.error
                match cause:
                    case StoreError(operation=operation):
                        stage = operation
                    case InconsistentTotal():
                        stage = VERIFY_TOTAL
                    case _:
                        stage = failure.step_name

                if not failure.rollback_complete:
                    rollback_cause = failure.compensation_errors[0]
                    log.error(
                        "checkout_rollback_failed",
                        stage=stage,
                        transaction_id=str(written.id) if written else None,
                        error=str(cause),
                        rollback_error=str(rollback_cause),
                    )
                    return Error(RollbackFailed(
                        stage,
                        cause,
                        transaction_id=written.id if written else None,
                        rollback_cause=rollback_cause,
                    ))

                log.warning(
                    "checkout_failed",
                    stage=stage,
                    error=str(cause),
                    rolled_back=failure.compensators_run,
                )
                return Error(CheckoutFailed(stage, cause))


__all__ = ("CheckoutCoordinator",)
