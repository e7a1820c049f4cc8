import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from school_library.book import BOOK_CATEGORIES, Book, BookDraft
from school_library.catalog import CatalogStore
from school_library.config import Settings, settings as default_settings
from school_library.errors import LookupFailed, NotFound, ValidationError
from school_library.inventory import InventoryCoordinator
from school_library.loan import Loan
from school_library.loans import LoanStore
from school_library.seed import DEMO_BOOKS, DEMO_LOANS
from school_library.services.google_books_service import LIBRARY_QUERIES, GoogleBooksService
from school_library.store import LibraryStore, utc_now_iso

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_PUBLISHER = "Unknown Publisher"
NO_DESCRIPTION = "No description available."


class Library:
    """Wires one in-memory store to the catalog, loan store and inventory coordinator."""

    def __init__(self, settings: Optional[Settings] = None, google_books: Optional[GoogleBooksService] = None,
                 seed: Optional[bool] = None, today: Optional[Callable[[], date]] = None) -> None:
        self.settings = settings or default_settings
        self.store = LibraryStore()
        self.inventory = InventoryCoordinator(self.store)
        self.catalog = CatalogStore(self.store, self.inventory)
        self.loans = LoanStore(self.store, self.inventory, today=today)

        if google_books is not None:
            self.google_books = google_books
        elif self.settings.enable_google_books:
            self.google_books = GoogleBooksService()
        else:
            self.google_books = None

        if self.settings.seed_demo_data if seed is None else seed:
            self.load_demo_data()

    # ------------------------- Demo data ------------------------- #
    def load_demo_data(self) -> None:
        """Replace the current state with the bundled demo books and loans."""
        now = utc_now_iso()
        with self.store.locked():
            self.store.clear()
            for data in DEMO_BOOKS:
                book = Book.from_dict({**data, "created_at": now, "updated_at": now})
                self.store.books[book.id] = book
            for data in DEMO_LOANS:
                loan = Loan.from_dict({**data, "created_at": now})
                self.store.loans[loan.id] = loan
        logger.info(f"Demo data loaded: {len(DEMO_BOOKS)} books, {len(DEMO_LOANS)} loans")

    # ------------------------- Google Books ------------------------- #
    def _require_google_books(self) -> GoogleBooksService:
        if self.google_books is None:
            raise LookupFailed("Google Books lookup is disabled.")
        return self.google_books

    async def lookup(self, query: str) -> Optional[BookDraft]:
        """Pre-fill data for the admin form: ISBN search, then free text."""
        return await self._require_google_books().lookup(query)

    async def add_book_from_lookup(self, query: str, stock: int = 1, category: Optional[str] = None) -> Book:
        draft = await self.lookup(query)
        if draft is None:
            raise NotFound(f"No Google Books result for '{query}'.")
        draft.stock = stock
        if category:
            draft.category = category
        return self.catalog.add(_with_import_defaults(draft))

    async def import_from_google_books(self, queries: Optional[Iterable[str]] = None,
                                       stock: Optional[int] = None) -> List[Book]:
        """Add the seed-query results to the catalog, skipping ISBNs already present."""
        service = self._require_google_books()
        stock = self.settings.default_import_stock if stock is None else stock
        drafts = await service.fetch_library_books(queries or LIBRARY_QUERIES, stock=stock)
        added = []
        for draft in drafts:
            if not draft.title:
                continue
            if draft.isbn and self.catalog.find_by_isbn(draft.isbn):
                logger.debug(f"Import skipped, ISBN {draft.isbn} already in catalog")
                continue
            try:
                added.append(self.catalog.add(_with_import_defaults(draft)))
            except ValidationError as e:
                logger.warning(f"Import skipped '{draft.title}': {e}")
        logger.info(f"Imported {len(added)} of {len(drafts)} Google Books results")
        return added

    # ------------------------- Statistics ------------------------- #
    def get_statistics(self) -> Dict[str, Any]:
        books = self.catalog.list()
        loans = self.loans.list_all()
        active = [loan for loan in loans if loan.is_active]
        return {
            "total_books": len(books),
            "total_stock": sum(book.stock for book in books),
            "available_books": sum(1 for book in books if book.is_available),
            "active_loans": len(active),
            "returned_loans": len(loans) - len(active),
            "active_borrowers": len({loan.student_nis for loan in active}),
            "categories": {category: sum(1 for b in books if b.category == category)
                           for category in BOOK_CATEGORIES if any(b.category == category for b in books)},
        }

    async def close(self) -> None:
        if self.google_books is not None:
            await self.google_books.close()


def _with_import_defaults(draft: BookDraft) -> BookDraft:
    draft.author = draft.author or UNKNOWN_AUTHOR
    draft.publisher = draft.publisher or UNKNOWN_PUBLISHER
    draft.description = draft.description or NO_DESCRIPTION
    return draft
