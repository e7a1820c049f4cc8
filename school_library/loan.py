from __future__ import annotations

from typing import Optional

from school_library.book import Book
from school_library.errors import AlreadyReturned, ValidationError

LOAN_ACTIVE = "active"
LOAN_RETURNED = "returned"


class Loan:
    """One borrow event. Moves from active to returned exactly once."""

    def __init__(self, id: str, book_id: str, student_name: str, student_class: str, student_nis: str,
                 borrow_date: str, return_date: str | None = None, status: str = LOAN_ACTIVE,
                 created_at: str | None = None) -> None:
        if (return_date is None) != (status == LOAN_ACTIVE):
            raise ValidationError("return_date must be set exactly when the loan is returned")
        self.id = id
        self.book_id = book_id
        self.student_name = student_name
        self.student_class = student_class
        self.student_nis = student_nis
        self.borrow_date = borrow_date
        self._return_date = return_date
        self._status = status
        self.created_at = created_at

    @property
    def status(self) -> str:
        return self._status

    @property
    def return_date(self) -> Optional[str]:
        return self._return_date

    @property
    def is_active(self) -> bool:
        return self._status == LOAN_ACTIVE

    def mark_returned(self, return_date: str) -> None:
        """Close the loan. Callers check is_active first; this guards anyway."""
        if not self.is_active:
            raise AlreadyReturned(f"Loan {self.id} is already returned")
        self._status = LOAN_RETURNED
        self._return_date = return_date

    def __repr__(self) -> str:  # pragma: no cover
        return f"Loan(id={self.id!r}, book_id={self.book_id!r}, status={self._status!r})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "student_name": self.student_name,
            "student_class": self.student_class,
            "student_nis": self.student_nis,
            "borrow_date": self.borrow_date,
            "return_date": self._return_date,
            "status": self._status,
            "created_at": self.created_at,
        }

    @staticmethod
    def from_dict(data: dict) -> "Loan":
        return Loan(
            id=data["id"],
            book_id=data["book_id"],
            student_name=data["student_name"],
            student_class=data["student_class"],
            student_nis=data["student_nis"],
            borrow_date=data["borrow_date"],
            return_date=data.get("return_date"),
            status=data.get("status", LOAN_ACTIVE),
            created_at=data.get("created_at"),
        )


class LoanView:
    """A loan joined with a snapshot of its book (None if the book was deleted)."""

    def __init__(self, loan: Loan, book: Optional[Book]) -> None:
        self.loan = loan
        self.book = book

    def __getattr__(self, name):
        # copy and pickle look up dunders before __init__ has set self.loan
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.loan, name)

    def to_dict(self) -> dict:
        data = self.loan.to_dict()
        data["book"] = self.book.to_dict() if self.book else None
        return data
