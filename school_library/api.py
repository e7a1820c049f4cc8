import logging
import secrets
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

from school_library.book import BOOK_CATEGORIES, DEFAULT_CATEGORY
from school_library.config import configure_logging, settings
from school_library.errors import (
    AlreadyReturned,
    LibraryError,
    LookupFailed,
    NotFound,
    OutOfStock,
    ValidationError,
)
from school_library.library import Library
from school_library.services.http_client import cleanup_http_client, get_http_client

logger = logging.getLogger(__name__)

configure_logging()

library = Library()


def get_library() -> Library:
    """Dependency returning the process-wide library; tests override it."""
    return library


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Open shared resources on startup
    await get_http_client()
    try:
        yield
    finally:
        await library.close()
        await cleanup_http_client()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Security ---
admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def require_admin(api_key: Optional[str] = Security(admin_key_header)) -> str:
    """Dependency guarding the admin endpoints."""
    if api_key and secrets.compare_digest(api_key, settings.admin_api_key):
        return api_key
    raise HTTPException(status_code=403, detail="Could not validate admin credentials")


# --- Error mapping ---
_STATUS_BY_ERROR = (
    (ValidationError, 422),
    (NotFound, 404),
    (OutOfStock, 409),
    (AlreadyReturned, 409),
    (LookupFailed, 502),
)


def _http_error(exc: LibraryError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


# --- Models ---
class BookModel(BaseModel):
    id: str
    title: str
    author: str
    publisher: str = ""
    year: int
    category: str
    description: str = ""
    cover_url: str = ""
    isbn: str = ""
    stock: int
    status: str
    created_at: str | None = None
    updated_at: str | None = None


class BookCreateModel(BaseModel):
    title: str
    author: str
    publisher: str = ""
    year: int | None = None
    category: str = DEFAULT_CATEGORY
    description: str = ""
    cover_url: str = ""
    isbn: str = ""
    stock: int = Field(default=1, description="Number of copies on the shelf")


class BookUpdateModel(BaseModel):
    title: str | None = None
    author: str | None = None
    publisher: str | None = None
    year: int | None = None
    category: str | None = None
    description: str | None = None
    cover_url: str | None = None
    isbn: str | None = None
    stock: int | None = None


class BookDraftModel(BaseModel):
    """Pre-fill data for the admin form, as returned by Google Books."""
    title: str
    author: str
    publisher: str
    year: int | None = None
    category: str
    description: str
    cover_url: str
    isbn: str
    stock: int


class ImportRequest(BaseModel):
    queries: List[str] | None = Field(default=None, description="Defaults to the built-in seed queries")
    stock: int | None = Field(default=None, ge=0)


class BorrowRequest(BaseModel):
    book_id: str
    student_name: str
    student_class: str
    student_nis: str


class LoanModel(BaseModel):
    id: str
    book_id: str
    student_name: str
    student_class: str
    student_nis: str
    borrow_date: str
    return_date: str | None = None
    status: str
    created_at: str | None = None
    book: BookModel | None = None


class StatsModel(BaseModel):
    total_books: int
    total_stock: int
    available_books: int
    active_loans: int
    returned_loans: int
    active_borrowers: int
    categories: Dict[str, int]


# --- Health ---
@app.get("/health")
def health(lib: Library = Depends(get_library)) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": len(lib.catalog),
        "services": {"google_books": lib.google_books is not None},
    }


# --- Catalog ---
@app.get("/categories", response_model=List[str])
def list_categories():
    return list(BOOK_CATEGORIES)


@app.get("/books", response_model=List[BookModel])
def get_books(
    q: Optional[str] = Query(None, description="Matches title, author or ISBN"),
    category: Optional[str] = Query(None, description="Exact category label"),
    lib: Library = Depends(get_library),
):
    """List catalog books, optionally filtered."""
    return [BookModel(**b.to_dict()) for b in lib.catalog.list(query=q, category=category)]


@app.get("/books/{book_id}", response_model=BookModel)
def get_book(book_id: str, lib: Library = Depends(get_library)):
    try:
        return BookModel(**lib.catalog.get(book_id).to_dict())
    except LibraryError as e:
        raise _http_error(e)


@app.post("/books", response_model=BookModel, status_code=201, dependencies=[Depends(require_admin)])
def add_book(payload: BookCreateModel, lib: Library = Depends(get_library)):
    try:
        book = lib.catalog.add(payload.model_dump())
    except LibraryError as e:
        raise _http_error(e)
    return BookModel(**book.to_dict())


@app.put("/books/{book_id}", response_model=BookModel, dependencies=[Depends(require_admin)])
def update_book(book_id: str, update: BookUpdateModel, lib: Library = Depends(get_library)):
    fields = update.model_dump(exclude_unset=True)
    try:
        book = lib.catalog.update(book_id, **fields)
    except LibraryError as e:
        raise _http_error(e)
    return BookModel(**book.to_dict())


@app.delete("/books/{book_id}", dependencies=[Depends(require_admin)])
def delete_book(book_id: str, lib: Library = Depends(get_library)):
    try:
        lib.catalog.remove(book_id)
    except LibraryError as e:
        raise _http_error(e)
    return {"message": "Book removed."}


@app.post("/books/import", response_model=List[BookModel], dependencies=[Depends(require_admin)])
async def import_books(payload: ImportRequest, lib: Library = Depends(get_library)):
    """Fill the catalog from Google Books using the seed queries."""
    try:
        books = await lib.import_from_google_books(queries=payload.queries, stock=payload.stock)
    except LibraryError as e:
        raise _http_error(e)
    return [BookModel(**b.to_dict()) for b in books]


@app.get("/lookup", response_model=BookDraftModel, dependencies=[Depends(require_admin)])
async def lookup_book(q: str = Query(..., min_length=1, description="ISBN or title"),
                      lib: Library = Depends(get_library)):
    """Google Books pre-fill for the admin book form."""
    try:
        draft = await lib.lookup(q)
    except LibraryError as e:
        raise _http_error(e)
    if draft is None:
        raise HTTPException(status_code=404, detail="No Google Books result.")
    return BookDraftModel(**draft.to_dict())


# --- Loans ---
@app.post("/loans", response_model=LoanModel, status_code=201)
def borrow_book(payload: BorrowRequest, lib: Library = Depends(get_library)):
    try:
        view = lib.loans.borrow(payload.book_id, payload.student_name, payload.student_class, payload.student_nis)
    except LibraryError as e:
        raise _http_error(e)
    return LoanModel(**view.to_dict())


@app.post("/loans/{loan_id}/return", response_model=LoanModel)
def return_book(loan_id: str, lib: Library = Depends(get_library)):
    try:
        view = lib.loans.return_loan(loan_id)
    except LibraryError as e:
        raise _http_error(e)
    return LoanModel(**view.to_dict())


@app.get("/loans/borrower/{nis}", response_model=List[LoanModel])
def get_borrower_loans(nis: str, lib: Library = Depends(get_library)):
    """Active loans of one student, looked up by NIS."""
    return [LoanModel(**v.to_dict()) for v in lib.loans.find_active_by_borrower(nis)]


@app.get("/loans/active", response_model=List[LoanModel], dependencies=[Depends(require_admin)])
def get_active_loans(lib: Library = Depends(get_library)):
    return [LoanModel(**v.to_dict()) for v in lib.loans.list_active()]


@app.get("/loans/returned", response_model=List[LoanModel], dependencies=[Depends(require_admin)])
def get_returned_loans(lib: Library = Depends(get_library)):
    return [LoanModel(**v.to_dict()) for v in lib.loans.list_returned()]


# --- Stats ---
@app.get("/stats", response_model=StatsModel)
def get_library_stats(lib: Library = Depends(get_library)):
    return StatsModel(**lib.get_statistics())
