from decimal import Decimal

import pytest
from kungfu import Ok, Error
from structlog.testing import capture_logs

from bookify import (
    Book,
    BookId,
    BookNotFound,
    CheckoutFailed,
    RollbackFailed,
    Transaction,
)
from bookify.catalog import CatalogCache
from bookify.checkout import CheckoutCoordinator, TransactionHistory
from bookify.ledger import CartLedger, CartLine
from bookify.store import InMemoryCatalogStore, StoreError


class TestSuccess:
    async def test_scenario_two_books(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        history: TransactionHistory,
        book1: Book,
        book2: Book,
    ) -> None:
        ledger.add_to_cart(book1.id, 2)
        ledger.add_to_cart(book2.id, 1)

        result = await coordinator.checkout()

        match result:
            case Ok(None):
                pytest.fail("Expected a transaction")
            case Ok(transaction):
                assert transaction.total_price == Decimal("25.00")
                assert [(i.book_id, i.quantity, i.price_at_purchase) for i in transaction.items] == [
                    (book1.id, 2, Decimal("10.00")),
                    (book2.id, 1, Decimal("5.00")),
                ]
                assert ledger.is_empty()
                assert history.latest == transaction
            case Error(e):
                pytest.fail(f"Expected Ok, got Error: {e}")

    async def test_two_store_calls(
        self, coordinator: CheckoutCoordinator, ledger: CartLedger, store: InMemoryCatalogStore, book1: Book
    ) -> None:
        ledger.add_to_cart(book1.id, 1)

        await coordinator.checkout()

        assert store.calls == ["insert_transaction_header", "insert_transaction_items"]

    async def test_persisted_transaction_listed(
        self, coordinator: CheckoutCoordinator, ledger: CartLedger, store: InMemoryCatalogStore, book1: Book
    ) -> None:
        ledger.add_to_cart(book1.id, 3)

        result = await coordinator.checkout()

        assert isinstance(result, Ok)
        listed = await store.list_transactions()
        assert listed == Ok([result.value])

    async def test_newest_first_in_history(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        history: TransactionHistory,
        book1: Book,
        book2: Book,
    ) -> None:
        ledger.add_to_cart(book1.id, 1)
        first = await coordinator.checkout()
        ledger.add_to_cart(book2.id, 1)
        second = await coordinator.checkout()

        assert isinstance(first, Ok) and isinstance(second, Ok)
        assert history.entries == [second.value, first.value]

    async def test_stock_not_decremented(
        self, coordinator: CheckoutCoordinator, ledger: CartLedger, catalog: CatalogCache, book1: Book
    ) -> None:
        ledger.add_to_cart(book1.id, 4)

        await coordinator.checkout()
        await catalog.refresh()

        assert catalog.get(book1.id).stock == book1.stock

    async def test_logs_commit(self, coordinator: CheckoutCoordinator, ledger: CartLedger, book1: Book) -> None:
        ledger.add_to_cart(book1.id, 1)

        with capture_logs() as logs:
            await coordinator.checkout()

        committed = [e for e in logs if e["event"] == "checkout_committed"]
        assert len(committed) == 1
        assert committed[0]["total"] == "10.00"


class TestEmptyLedger:
    async def test_no_store_calls(
        self,
        coordinator: CheckoutCoordinator,
        store: InMemoryCatalogStore,
        history: TransactionHistory,
    ) -> None:
        result = await coordinator.checkout()

        assert result == Ok(None)
        assert store.calls == []
        assert len(history) == 0


class TestFailure:
    async def test_items_failure_rolls_back_header(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        history: TransactionHistory,
        store: InMemoryCatalogStore,
        book1: Book,
        book2: Book,
    ) -> None:
        ledger.add_to_cart(book1.id, 2)
        ledger.add_to_cart(book2.id, 1)
        store.fail_on.add("insert_transaction_items")

        result = await coordinator.checkout()

        match result:
            case Ok(value):
                pytest.fail(f"Expected Error, got Ok: {value}")
            case Error(e):
                assert type(e) is CheckoutFailed
                assert e.stage == "insert_transaction_items"
                assert isinstance(e.cause, StoreError)

        assert store.calls == [
            "insert_transaction_header",
            "insert_transaction_items",
            "delete_transaction_header",
        ]
        assert store.headers == []
        assert ledger.lines() == [CartLine(book1.id, 2), CartLine(book2.id, 1)]
        assert len(history) == 0
        assert await store.list_transactions() == Ok([])

    async def test_retry_after_failure_succeeds(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        store: InMemoryCatalogStore,
        book1: Book,
    ) -> None:
        ledger.add_to_cart(book1.id, 2)
        store.fail_on.add("insert_transaction_items")
        await coordinator.checkout()

        store.fail_on.clear()
        result = await coordinator.checkout()

        assert isinstance(result, Ok)
        assert result.value.total_price == Decimal("20.00")
        assert len(store.headers) == 1

    async def test_rollback_failure(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        history: TransactionHistory,
        store: InMemoryCatalogStore,
        book1: Book,
    ) -> None:
        ledger.add_to_cart(book1.id, 1)
        store.fail_on.update({"insert_transaction_items", "delete_transaction_header"})

        with capture_logs() as logs:
            result = await coordinator.checkout()

        match result:
            case Ok(value):
                pytest.fail(f"Expected Error, got Ok: {value}")
            case Error(e):
                assert isinstance(e, RollbackFailed)
                assert isinstance(e, CheckoutFailed)
                assert e.stage == "insert_transaction_items"
                [orphan] = store.headers
                assert e.transaction_id == orphan.id
                assert isinstance(e.rollback_cause, StoreError)
                assert e.rollback_cause.operation == "delete_transaction_header"

        errors = [entry for entry in logs if entry["event"] == "checkout_rollback_failed"]
        assert len(errors) == 1
        assert errors[0]["log_level"] == "error"
        assert ledger.quantity_of(book1.id) == 1
        assert len(history) == 0

    async def test_orphan_skipped_when_listing(
        self, coordinator: CheckoutCoordinator, ledger: CartLedger, store: InMemoryCatalogStore, book1: Book
    ) -> None:
        ledger.add_to_cart(book1.id, 1)
        store.fail_on.update({"insert_transaction_items", "delete_transaction_header"})
        await coordinator.checkout()
        store.fail_on.clear()

        with capture_logs() as logs:
            listed = await store.list_transactions()

        assert listed == Ok([])
        assert [e["event"] for e in logs] == ["orphaned_transaction_header"]

    async def test_header_failure(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        store: InMemoryCatalogStore,
        book1: Book,
    ) -> None:
        ledger.add_to_cart(book1.id, 1)
        store.fail_on.add("insert_transaction_header")

        result = await coordinator.checkout()

        assert isinstance(result, Error)
        assert type(result.error) is CheckoutFailed
        assert result.error.stage == "insert_transaction_header"
        assert store.calls == ["insert_transaction_header"]
        assert ledger.quantity_of(book1.id) == 1

    async def test_unresolvable_book(
        self,
        coordinator: CheckoutCoordinator,
        ledger: CartLedger,
        store: InMemoryCatalogStore,
        book1: Book,
    ) -> None:
        ghost = BookId("ghost")
        ledger.add_to_cart(book1.id, 1)
        ledger.add_to_cart(ghost, 1)

        result = await coordinator.checkout()

        assert result == Error(CheckoutFailed("resolve_items", BookNotFound(ghost)))
        assert store.calls == []
        assert len(ledger) == 2

    async def test_raising_store_is_lifted(
        self,
        ledger: CartLedger,
        catalog: CatalogCache,
        history: TransactionHistory,
        store: InMemoryCatalogStore,
        book1: Book,
    ) -> None:
        class Exploding(InMemoryCatalogStore):
            async def insert_transaction_items(self, transaction_id, items):
                raise ConnectionError("socket closed")

        exploding = Exploding([book1])
        coordinator = CheckoutCoordinator(exploding, ledger, catalog, history)
        ledger.add_to_cart(book1.id, 1)

        result = await coordinator.checkout()

        match result:
            case Ok(value):
                pytest.fail(f"Expected Error, got Ok: {value}")
            case Error(e):
                assert e.stage == "insert_transaction_items"
                assert isinstance(e.cause, StoreError)
                assert isinstance(e.cause.cause, ConnectionError)
        assert exploding.headers == []


class TestTransaction:
    def test_is_immutable_snapshot(self, book1: Book) -> None:
        from bookify import TransactionId, TransactionItem
        from conftest import T0

        transaction = Transaction(
            id=TransactionId("t"),
            created_at=T0,
            total_price=Decimal("20.00"),
            items=(TransactionItem(book1.id, 2, Decimal("10.00")),),
        )

        with pytest.raises(AttributeError):
            transaction.total_price = Decimal("0")  # type: ignore[misc]
        assert transaction.item_count == 2
