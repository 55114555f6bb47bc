from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from bookify import BookId, BookPatch, TransactionId, TransactionItemDraft
from bookify.store import SqlCatalogStore, from_cents, to_cents

from conftest import TickingClock, make_draft


@pytest.fixture
async def sql_store() -> AsyncIterator[SqlCatalogStore]:
    store = await SqlCatalogStore.connect("sqlite+aiosqlite:///:memory:", clock=TickingClock())
    yield store
    await store.close()


class TestCents:
    def test_round_half_up(self) -> None:
        assert to_cents(Decimal("29.99")) == 2999
        assert to_cents(Decimal("0.005")) == 1
        assert to_cents(Decimal("10")) == 1000

    def test_from_cents(self) -> None:
        assert from_cents(2499) == Decimal("24.99")
        assert str(from_cents(1000)) == "10.00"


class TestBooks:
    async def test_insert_and_list_newest_first(self, sql_store: SqlCatalogStore) -> None:
        first = (await sql_store.insert_book(make_draft(title="First"))).unwrap()
        second = (await sql_store.insert_book(make_draft(title="Second"))).unwrap()

        listed = (await sql_store.list_books()).unwrap()

        assert [b.title for b in listed] == ["Second", "First"]
        assert listed[1] == first
        assert second.price == Decimal("39.50")
        assert second.created_at.tzinfo is not None

    async def test_update(self, sql_store: SqlCatalogStore) -> None:
        book = (await sql_store.insert_book(make_draft())).unwrap()

        result = await sql_store.update_book(book.id, BookPatch(price=Decimal("12.25"), stock=1))

        assert result == Ok(None)
        [stored] = (await sql_store.list_books()).unwrap()
        assert stored.price == Decimal("12.25")
        assert stored.stock == 1
        assert stored.title == book.title

    async def test_update_unknown(self, sql_store: SqlCatalogStore) -> None:
        result = await sql_store.update_book(BookId("ghost"), BookPatch(stock=1))

        assert isinstance(result, Error)
        assert result.error.operation == "update_book"

    async def test_delete(self, sql_store: SqlCatalogStore) -> None:
        book = (await sql_store.insert_book(make_draft())).unwrap()

        assert await sql_store.delete_book(book.id) == Ok(None)
        assert await sql_store.list_books() == Ok([])

        again = await sql_store.delete_book(book.id)
        assert isinstance(again, Error)


class TestTransactions:
    async def test_two_step_write_and_list(self, sql_store: SqlCatalogStore) -> None:
        book = (await sql_store.insert_book(make_draft(price=Decimal("10.00")))).unwrap()
        header = (await sql_store.insert_transaction_header(Decimal("20.00"))).unwrap()

        items = await sql_store.insert_transaction_items(
            header.id, [TransactionItemDraft(book.id, 2, Decimal("10.00"))]
        )

        match items:
            case Ok([item]):
                assert item.book == book
                assert item.subtotal == Decimal("20.00")
            case other:
                pytest.fail(f"Expected one item, got {other}")

        [transaction] = (await sql_store.list_transactions()).unwrap()
        assert transaction.id == header.id
        assert transaction.total_price == Decimal("20.00")
        assert transaction.items[0].quantity == 2

    async def test_items_need_header(self, sql_store: SqlCatalogStore) -> None:
        result = await sql_store.insert_transaction_items(
            TransactionId("missing"), [TransactionItemDraft(BookId("b"), 1, Decimal("1.00"))]
        )

        assert isinstance(result, Error)
        assert result.error.operation == "insert_transaction_items"

    async def test_delete_header_removes_transaction(self, sql_store: SqlCatalogStore) -> None:
        header = (await sql_store.insert_transaction_header(Decimal("1.00"))).unwrap()
        await sql_store.insert_transaction_items(
            header.id, [TransactionItemDraft(BookId("b"), 1, Decimal("1.00"))]
        )

        assert await sql_store.delete_transaction_header(header.id) == Ok(None)
        assert await sql_store.list_transactions() == Ok([])

    async def test_orphan_header_skipped(self, sql_store: SqlCatalogStore) -> None:
        await sql_store.insert_transaction_header(Decimal("1.00"))

        assert await sql_store.list_transactions() == Ok([])

    async def test_history_survives_book_deletion(self, sql_store: SqlCatalogStore) -> None:
        book = (await sql_store.insert_book(make_draft(price=Decimal("3.00")))).unwrap()
        header = (await sql_store.insert_transaction_header(Decimal("3.00"))).unwrap()
        await sql_store.insert_transaction_items(header.id, [TransactionItemDraft(book.id, 1, book.price)])
        await sql_store.delete_book(book.id)

        [transaction] = (await sql_store.list_transactions()).unwrap()

        assert transaction.items[0].book is None
        assert transaction.items[0].price_at_purchase == Decimal("3.00")

    async def test_item_order_preserved(self, sql_store: SqlCatalogStore) -> None:
        header = (await sql_store.insert_transaction_header(Decimal("6.00"))).unwrap()
        drafts = [
            TransactionItemDraft(BookId("z"), 1, Decimal("1.00")),
            TransactionItemDraft(BookId("a"), 1, Decimal("2.00")),
            TransactionItemDraft(BookId("m"), 1, Decimal("3.00")),
        ]
        await sql_store.insert_transaction_items(header.id, drafts)

        [transaction] = (await sql_store.list_transactions()).unwrap()

        assert [i.book_id.value for i in transaction.items] == ["z", "a", "m"]
