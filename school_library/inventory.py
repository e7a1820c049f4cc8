"""Stock bookkeeping for catalog books.

The coordinator is the only component that writes ``Book.stock``. Every borrow
performs exactly one decrement and every return exactly one increment, so for
each book::

    initial_stock == current_stock + number of active loans

holds between operations. Admin stock corrections (``set_stock``) move that
baseline.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from school_library.book import Book
from school_library.errors import NotFound, OutOfStock, ValidationError
from school_library.store import LibraryStore, utc_now_iso

logger = logging.getLogger(__name__)


class InventoryCoordinator:
    def __init__(self, store: LibraryStore) -> None:
        self.store = store

    @contextmanager
    def lock_for(self, book_id: str, missing_ok: bool = False) -> Iterator[None]:
        """Serialize stock transitions for one book. Unknown ids raise NotFound
        unless ``missing_ok`` is set."""
        with self.store.book_lock(book_id, missing_ok=missing_ok):
            yield

    def _get_book(self, book_id: str) -> Book:
        book = self.store.books.get(book_id)
        if book is None:
            raise NotFound(f"Book {book_id} not found.")
        return book

    def decrement(self, book_id: str) -> Book:
        with self.lock_for(book_id):
            book = self._get_book(book_id)
            if book.stock <= 0:
                logger.warning(f"Stock decrement rejected for book {book_id}: no copies left")
                raise OutOfStock(f"'{book.title}' is out of stock.")
            book.stock -= 1
            book.updated_at = utc_now_iso()
            logger.debug(f"Book {book_id} stock -> {book.stock} ({book.status})")
            return book

    def increment(self, book_id: str) -> Book:
        # Unconditional: the loan record is trusted, no upper bound is enforced
        with self.lock_for(book_id):
            book = self._get_book(book_id)
            book.stock += 1
            book.updated_at = utc_now_iso()
            logger.debug(f"Book {book_id} stock -> {book.stock} ({book.status})")
            return book

    def set_stock(self, book_id: str, stock: int) -> Book:
        validate_stock(stock)
        with self.lock_for(book_id):
            book = self._get_book(book_id)
            if book.stock != stock:
                logger.info(f"Stock for book {book_id} corrected: {book.stock} -> {stock}")
            book.stock = stock
            book.updated_at = utc_now_iso()
            return book

    def check_consistency(self, book_id: str, initial_stock: int) -> bool:
        with self.lock_for(book_id):
            book = self._get_book(book_id)
            return initial_stock == book.stock + self.store.active_loan_count(book_id)


def validate_stock(stock) -> int:
    if isinstance(stock, bool) or not isinstance(stock, int):
        raise ValidationError("Stock must be an integer.")
    if stock < 0:
        raise ValidationError("Stock cannot be negative.")
    return stock
