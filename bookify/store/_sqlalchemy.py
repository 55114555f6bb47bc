"""
SQLAlchemy store — durable CatalogStore on any async SQLAlchemy engine.

Usage:
    store = await SqlCatalogStore.connect("sqlite+aiosqlite:///bookify.db")
    books = await store.list_books()
    ...
    await store.close()

Prices are persisted as integer cents, rounded half-up.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, delete, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, selectinload

from kungfu import Result, Ok, Error

from bookify._log import get_logger
from bookify._types import (
    Book,
    BookDraft,
    BookId,
    BookPatch,
    Transaction,
    TransactionHeader,
    TransactionId,
    TransactionItem,
    TransactionItemDraft,
)
from bookify.store._memory import utcnow
from bookify.store._types import StoreError

log = get_logger("store.sql")

_CENT = Decimal("0.01")


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class BookTable(Base):
    __tablename__ = "books"

    # Insertion order; breaks created_at ties
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    cover_url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class TransactionTable(Base):
    __tablename__ = "transactions"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    items: Mapped[list[TransactionItemTable]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItemTable.position",
    )


class TransactionItemTable(Base):
    __tablename__ = "transaction_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # No foreign key: history outlives deleted books
    book_id: Mapped[str] = mapped_column(String(36), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    transaction: Mapped[TransactionTable] = relationship(back_populates="items")


# ═══════════════════════════════════════════════════════════════════════════════
# Conversions
# ═══════════════════════════════════════════════════════════════════════════════


def to_cents(amount: Decimal) -> int:
    return int((amount / _CENT).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) * _CENT).quantize(_CENT)


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _to_book(row: BookTable) -> Book:
    return Book(
        id=BookId(row.id),
        title=row.title,
        author=row.author,
        price=from_cents(row.price_cents),
        cover_url=row.cover_url,
        description=row.description,
        category=row.category,
        stock=row.stock,
        created_at=_aware(row.created_at),
    )


def _to_header(row: TransactionTable) -> TransactionHeader:
    return TransactionHeader(
        id=TransactionId(row.id),
        created_at=_aware(row.created_at),
        total_price=from_cents(row.total_cents),
    )


def _to_item(row: TransactionItemTable, books: dict[str, Book]) -> TransactionItem:
    return TransactionItem(
        book_id=BookId(row.book_id),
        quantity=row.quantity,
        price_at_purchase=from_cents(row.price_cents),
        book=books.get(row.book_id),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SqlCatalogStore:
    """
    CatalogStore over SQLAlchemy async sessions.

    One session per call; nothing spans two calls, which is why checkout
    needs a compensating delete.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine
        self._clock = clock

    @classmethod
    async def connect(
        cls,
        url: str = "sqlite+aiosqlite:///:memory:",
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> SqlCatalogStore:
        """Create engine, create tables, return a store that owns the engine."""
        engine = create_async_engine(url, echo=False)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        log.info("sql_store_connected", url=engine.url.render_as_string(hide_password=True))
        return cls(async_sessionmaker(engine, expire_on_commit=False), engine, clock=clock)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    # ── books ───────────────────────────────────────────

    async def list_books(self) -> Result[list[Book], StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = select(BookTable).order_by(
                    BookTable.created_at.desc(), BookTable.seq.desc()
                )
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_book(row) for row in rows])

        except Exception as e:
            return Error(StoreError("list_books", f"Failed to list books: {e}", e))

    async def insert_book(self, draft: BookDraft) -> Result[Book, StoreError]:
        try:
            async with self._session_factory() as session:
                row = BookTable(
                    id=uuid.uuid4().hex,
                    title=draft.title,
                    author=draft.author,
                    price_cents=to_cents(draft.price),
                    cover_url=draft.cover_url,
                    description=draft.description,
                    category=draft.category,
                    stock=draft.stock,
                    created_at=_naive_utc(self._clock()),
                )
                session.add(row)
                await session.commit()
                return Ok(_to_book(row))

        except Exception as e:
            return Error(StoreError("insert_book", f"Failed to insert book: {e}", e))

    async def update_book(
        self, book_id: BookId, patch: BookPatch
    ) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = select(BookTable).where(BookTable.id == book_id.value)
                row = (await session.execute(stmt)).scalar_one_or_none()

                if row is None:
                    return Error(StoreError("update_book", f"book {book_id} not found"))

                for name, value in patch.changes().items():
                    if name == "price":
                        row.price_cents = to_cents(value)  # type: ignore[arg-type]
                    else:
                        setattr(row, name, value)

                await session.commit()
                return Ok(None)

        except Exception as e:
            return Error(StoreError("update_book", f"Failed to update book: {e}", e))

    async def delete_book(self, book_id: BookId) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = delete(BookTable).where(BookTable.id == book_id.value)
                cursor = await session.execute(stmt)
                await session.commit()

                if cursor.rowcount == 0:
                    return Error(StoreError("delete_book", f"book {book_id} not found"))
                return Ok(None)

        except Exception as e:
            return Error(StoreError("delete_book", f"Failed to delete book: {e}", e))

    # ── transactions ────────────────────────────────────

    async def insert_transaction_header(
        self, total_price: Decimal
    ) -> Result[TransactionHeader, StoreError]:
        try:
            async with self._session_factory() as session:
                row = TransactionTable(
                    id=uuid.uuid4().hex,
                    total_cents=to_cents(total_price),
                    created_at=_naive_utc(self._clock()),
                )
                session.add(row)
                await session.commit()
                return Ok(_to_header(row))

        except Exception as e:
            return Error(StoreError(
                "insert_transaction_header", f"Failed to insert transaction: {e}", e
            ))

    async def insert_transaction_items(
        self,
        transaction_id: TransactionId,
        items: list[TransactionItemDraft],
    ) -> Result[list[TransactionItem], StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = select(TransactionTable.id).where(
                    TransactionTable.id == transaction_id.value
                )
                if (await session.execute(stmt)).scalar_one_or_none() is None:
                    return Error(StoreError(
                        "insert_transaction_items",
                        f"transaction {transaction_id} not found",
                    ))

                rows = [
                    TransactionItemTable(
                        transaction_id=transaction_id.value,
                        position=position,
                        book_id=draft.book_id.value,
                        quantity=draft.quantity,
                        price_cents=to_cents(draft.price),
                    )
                    for position, draft in enumerate(items)
                ]
                session.add_all(rows)
                await session.commit()

                books = await self._books_by_id(session, {d.book_id.value for d in items})
                return Ok([_to_item(row, books) for row in rows])

        except Exception as e:
            return Error(StoreError(
                "insert_transaction_items", f"Failed to insert items: {e}", e
            ))

    async def delete_transaction_header(
        self, transaction_id: TransactionId
    ) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(TransactionItemTable).where(
                        TransactionItemTable.transaction_id == transaction_id.value
                    )
                )
                cursor = await session.execute(
                    delete(TransactionTable).where(
                        TransactionTable.id == transaction_id.value
                    )
                )
                await session.commit()

                if cursor.rowcount == 0:
                    return Error(StoreError(
                        "delete_transaction_header",
                        f"transaction {transaction_id} not found",
                    ))
                return Ok(None)

        except Exception as e:
            return Error(StoreError(
                "delete_transaction_header", f"Failed to delete transaction: {e}", e
            ))

    async def list_transactions(self) -> Result[list[Transaction], StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(TransactionTable)
                    .options(selectinload(TransactionTable.items))
                    .order_by(TransactionTable.created_at.desc(), TransactionTable.seq.desc())
                )
                rows = (await session.execute(stmt)).scalars().all()

                book_ids = {item.book_id for row in rows for item in row.items}
                books = await self._books_by_id(session, book_ids)

                transactions: list[Transaction] = []
                for row in rows:
                    if not row.items:
                        log.warning("orphaned_transaction_header", transaction_id=row.id)
                        continue
                    transactions.append(Transaction.from_header(
                        _to_header(row),
                        [_to_item(item, books) for item in row.items],
                    ))
                return Ok(transactions)

        except Exception as e:
            return Error(StoreError(
                "list_transactions", f"Failed to list transactions: {e}", e
            ))

    async def _books_by_id(
        self, session: AsyncSession, book_ids: set[str]
    ) -> dict[str, Book]:
        if not book_ids:
            return {}
        stmt = select(BookTable).where(BookTable.id.in_(book_ids))
        rows = (await session.execute(stmt)).scalars().all()
        return {row.id: _to_book(row) for row in rows}


__all__ = (
    "Base",
    "BookTable",
    "TransactionTable",
    "TransactionItemTable",
    "SqlCatalogStore",
    "to_cents",
    "from_cents",
)
