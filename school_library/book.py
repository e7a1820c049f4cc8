from __future__ import annotations

import copy
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Optional


BOOK_CATEGORIES = (
    "Fiction",
    "Non-Fiction",
    "Science",
    "Mathematics",
    "History",
    "Language",
    "Religion",
    "Technology",
    "Art",
    "Sports",
    "Encyclopedia",
    "Comics",
    "Novel",
    "Biography",
    "Other",
)

DEFAULT_CATEGORY = "Other"

STATUS_AVAILABLE = "available"
STATUS_BORROWED = "borrowed"


@dataclass
class BookDraft:
    """Fields for a book that has not been added to the catalog yet."""
    title: str
    author: str
    publisher: str = ""
    year: Optional[int] = None
    category: str = DEFAULT_CATEGORY
    description: str = ""
    cover_url: str = ""
    isbn: str = ""
    stock: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Book:
    """A single title in the school catalog."""

    def __init__(self, id: str, title: str, author: str, publisher: str = "", year: Optional[int] = None,
                 category: str = DEFAULT_CATEGORY, description: str = "", cover_url: str = "",
                 isbn: str = "", stock: int = 0, created_at: str | None = None,
                 updated_at: str | None = None) -> None:
        self.id = id
        self.title = title.strip()
        self.author = author.strip()
        self.publisher = publisher or ""
        self.year = year if year is not None else date.today().year
        self.category = category or DEFAULT_CATEGORY
        self.description = description or ""
        self.cover_url = cover_url or ""
        self.isbn = (isbn or "").strip()
        self.stock = stock
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def status(self) -> str:
        # Derived from stock only; there is no setter.
        return STATUS_AVAILABLE if self.stock > 0 else STATUS_BORROWED

    @property
    def is_available(self) -> bool:
        return self.stock > 0

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(id={self.id!r}, title={self.title!r}, stock={self.stock})"

    def copy(self) -> "Book":
        return copy.copy(self)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
            "year": self.year,
            "category": self.category,
            "description": self.description,
            "cover_url": self.cover_url,
            "isbn": self.isbn,
            "stock": self.stock,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        # 'status' is ignored on purpose: it is always recomputed from stock
        return Book(
            id=data["id"],
            title=data["title"],
            author=data["author"],
            publisher=data.get("publisher", ""),
            year=data.get("year"),
            category=data.get("category", DEFAULT_CATEGORY),
            description=data.get("description", ""),
            cover_url=data.get("cover_url", ""),
            isbn=data.get("isbn", ""),
            stock=int(data.get("stock", 0)),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
