import copy
import logging
import uuid
from datetime import date
from typing import Callable, List, Optional

from school_library.errors import AlreadyReturned, NotFound
from school_library.inventory import InventoryCoordinator
from school_library.loan import Loan, LoanView
from school_library.store import LibraryStore, utc_now_iso
from school_library.utils.validators import TextValidator

logger = logging.getLogger(__name__)


class LoanStore:
    """Borrow and return books, and the joined loan views used by the UI."""

    def __init__(self, store: LibraryStore, inventory: InventoryCoordinator,
                 today: Optional[Callable[[], date]] = None) -> None:
        self.store = store
        self.inventory = inventory
        self._today = today or date.today

    # ------------------------- Transitions ------------------------- #
    def borrow(self, book_id: str, student_name: str, student_class: str, student_nis: str) -> LoanView:
        """Record a new active loan and take one copy out of stock.

        Raises ValidationError for blank borrower fields, NotFound for an unknown
        book and OutOfStock when no copies are left. On any error neither the
        loan nor the stock change is kept.
        """
        name = TextValidator.require(student_name, "Student name")
        klass = TextValidator.require(student_class, "Student class")
        nis = TextValidator.require(student_nis, "Student NIS")

        with self.inventory.lock_for(book_id):
            self.inventory.decrement(book_id)
            try:
                loan = Loan(
                    id=uuid.uuid4().hex,
                    book_id=book_id,
                    student_name=name,
                    student_class=klass,
                    student_nis=nis,
                    borrow_date=self._today().isoformat(),
                    created_at=utc_now_iso(),
                )
                with self.store.locked():
                    self.store.loans[loan.id] = loan
            except Exception:
                self.inventory.increment(book_id)
                raise
            view = self._join(loan)
        logger.info(f"Loan {loan.id}: book {book_id} borrowed by NIS {nis}")
        return view

    def return_loan(self, loan_id: str) -> LoanView:
        """Close an active loan and put its copy back in stock."""
        loan = self.store.loans.get(loan_id)
        if loan is None:
            raise NotFound(f"Loan {loan_id} not found.")

        # The book may have been deleted, leaving the loan orphaned
        with self.inventory.lock_for(loan.book_id, missing_ok=True):
            if not loan.is_active:
                logger.warning(f"Loan {loan_id} already returned on {loan.return_date}")
                raise AlreadyReturned(f"Loan {loan_id} was already returned on {loan.return_date}.")
            book_exists = loan.book_id in self.store.books
            loan.mark_returned(self._today().isoformat())
            if book_exists:
                self.inventory.increment(loan.book_id)
            else:
                logger.warning(f"Loan {loan_id} returned for deleted book {loan.book_id}; stock not restored")
            view = self._join(loan)
        logger.info(f"Loan {loan_id}: book {loan.book_id} returned")
        return view

    # ------------------------- Views ------------------------- #
    def get(self, loan_id: str) -> LoanView:
        loan = self.store.loans.get(loan_id)
        if loan is None:
            raise NotFound(f"Loan {loan_id} not found.")
        return self._join(loan)

    def find_active_by_borrower(self, nis: str) -> List[LoanView]:
        nis = (nis or "").strip()
        if not nis:
            return []
        return [self._join(loan) for loan in self._snapshot() if loan.is_active and loan.student_nis == nis]

    def list_active(self) -> List[LoanView]:
        return [self._join(loan) for loan in self._snapshot() if loan.is_active]

    def list_returned(self) -> List[LoanView]:
        return [self._join(loan) for loan in self._snapshot() if not loan.is_active]

    def list_all(self) -> List[LoanView]:
        return [self._join(loan) for loan in self._snapshot()]

    def _snapshot(self) -> List[Loan]:
        with self.store.locked():
            return list(self.store.loans.values())

    def _join(self, loan: Loan) -> LoanView:
        book = self.store.books.get(loan.book_id)
        return LoanView(copy.copy(loan), book.copy() if book else None)
