import logging
import uuid
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from school_library.book import BOOK_CATEGORIES, DEFAULT_CATEGORY, Book, BookDraft
from school_library.errors import NotFound, ValidationError
from school_library.inventory import InventoryCoordinator, validate_stock
from school_library.store import LibraryStore, utc_now_iso
from school_library.utils.validators import TextValidator

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"title", "author", "publisher", "year", "category", "description", "cover_url", "isbn", "stock"}
)


def _validate_category(category: Optional[str]) -> str:
    if not category:
        return DEFAULT_CATEGORY
    if category not in BOOK_CATEGORIES:
        raise ValidationError(f"Unknown category '{category}'. Allowed: {', '.join(BOOK_CATEGORIES)}")
    return category


def _validate_year(year) -> Optional[int]:
    if year is None:
        return None
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError("Year must be an integer.")
    return year


class CatalogStore:
    """Book records: create, edit, delete and filtered listing.

    Stock changes are delegated to the InventoryCoordinator so that it stays the
    only writer of ``Book.stock``.
    """

    def __init__(self, store: LibraryStore, inventory: InventoryCoordinator) -> None:
        self.store = store
        self.inventory = inventory

    # ------------------------- Core operations ------------------------- #
    def add(self, draft: Union[BookDraft, Mapping[str, Any]]) -> Book:
        """Create a book from a draft and return a copy of the stored record."""
        data = draft.to_dict() if isinstance(draft, BookDraft) else dict(draft)
        unknown = set(data) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown book fields: {', '.join(sorted(unknown))}")

        title = TextValidator.require(data.get("title"), "Title")
        author = TextValidator.require(data.get("author"), "Author")
        stock = validate_stock(data.get("stock", 1))
        now = utc_now_iso()
        book = Book(
            id=uuid.uuid4().hex,
            title=title,
            author=author,
            publisher=data.get("publisher") or "",
            year=_validate_year(data.get("year")),
            category=_validate_category(data.get("category")),
            description=data.get("description") or "",
            cover_url=data.get("cover_url") or "",
            isbn=data.get("isbn") or "",
            stock=stock,
            created_at=now,
            updated_at=now,
        )
        with self.store.locked():
            self.store.books[book.id] = book
        logger.info(f"Book added: {book.id} '{book.title}' (stock={book.stock})")
        return book.copy()

    def update(self, book_id: str, **fields: Any) -> Book:
        """Merge ``fields`` into an existing book. Stock goes through the coordinator."""
        if not fields:
            raise ValidationError("Nothing to update.")
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        changes: Dict[str, Any] = {}
        for name, value in fields.items():
            if name in ("title", "author"):
                changes[name] = TextValidator.require(value, name.capitalize())
            elif name == "category":
                changes[name] = _validate_category(value)
            elif name == "year":
                if value is None:
                    raise ValidationError("Year cannot be empty.")
                changes[name] = _validate_year(value)
            elif name == "stock":
                changes[name] = validate_stock(value)
            else:
                changes[name] = str(value).strip() if value else ""

        with self.inventory.lock_for(book_id):
            book = self._get(book_id)
            new_stock = changes.pop("stock", None)
            for name, value in changes.items():
                setattr(book, name, value)
            book.updated_at = utc_now_iso()
            if new_stock is not None:
                self.inventory.set_stock(book_id, new_stock)
            logger.info(f"Book updated: {book_id} ({', '.join(sorted(fields))})")
            return book.copy()

    def remove(self, book_id: str) -> None:
        """Delete a book. Loans that reference it are kept and become orphaned."""
        with self.inventory.lock_for(book_id):
            with self.store.locked():
                book = self.store.books.pop(book_id, None)
                self.store.discard_book_lock(book_id)
        if book is None:
            raise NotFound(f"Book {book_id} not found.")
        active = self.store.active_loan_count(book_id)
        if active:
            logger.warning(f"Book {book_id} removed with {active} active loan(s) still open")
        else:
            logger.info(f"Book removed: {book_id} '{book.title}'")

    def get(self, book_id: str) -> Book:
        return self._get(book_id).copy()

    def find(self, book_id: str) -> Optional[Book]:
        book = self.store.books.get(book_id)
        return book.copy() if book else None

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        if not isbn:
            return None
        with self.store.locked():
            for book in self.store.books.values():
                if book.isbn == isbn:
                    return book.copy()
        return None

    def list(self, query: Optional[str] = None, category: Optional[str] = None) -> Tuple[Book, ...]:
        """Books whose title, author or ISBN contains ``query`` (case-insensitive),
        optionally restricted to one category. Insertion order is preserved."""
        needle = (query or "").strip().lower()
        with self.store.locked():
            books = list(self.store.books.values())
        result = []
        for book in books:
            if category and book.category != category:
                continue
            if needle and not (
                needle in book.title.lower()
                or needle in book.author.lower()
                or needle in book.isbn.lower()
            ):
                continue
            result.append(book.copy())
        return tuple(result)

    def __len__(self) -> int:
        return len(self.store.books)

    # ------------------------- Helpers ------------------------- #
    def _get(self, book_id: str) -> Book:
        book = self.store.books.get(book_id)
        if book is None:
            raise NotFound(f"Book {book_id} not found.")
        return book
