import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator

from school_library.book import Book
from school_library.errors import NotFound
from school_library.loan import Loan


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LibraryStore:
    """In-memory state shared by the catalog, loan store and inventory coordinator.

    Construct one per process (or per test) and pass it to the components that
    need it. ``books`` and ``loans`` keep insertion order.
    """

    def __init__(self) -> None:
        self.books: Dict[str, Book] = {}
        self.loans: Dict[str, Loan] = {}
        # Guards the two mappings and the lock registry
        self._lock = threading.RLock()
        self._book_locks: Dict[str, threading.RLock] = {}

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def book_lock(self, book_id: str, missing_ok: bool = False) -> threading.RLock:
        """Return the lock guarding one book's stock transitions.

        Locks exist only for books in the catalog. For an unknown id this raises
        NotFound, or returns the store-wide lock when ``missing_ok`` is set.
        """
        with self._lock:
            lock = self._book_locks.get(book_id)
            if lock is not None:
                return lock
            if book_id not in self.books:
                if missing_ok:
                    return self._lock
                raise NotFound(f"Book {book_id} not found.")
            lock = threading.RLock()
            self._book_locks[book_id] = lock
            return lock

    def discard_book_lock(self, book_id: str) -> None:
        with self._lock:
            self._book_locks.pop(book_id, None)

    def book_lock_count(self) -> int:
        with self._lock:
            return len(self._book_locks)

    def active_loan_count(self, book_id: str) -> int:
        with self._lock:
            return sum(1 for loan in self.loans.values() if loan.book_id == book_id and loan.is_active)

    def clear(self) -> None:
        with self._lock:
            self.books.clear()
            self.loans.clear()
            self._book_locks.clear()
