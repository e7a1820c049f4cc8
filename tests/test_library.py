import asyncio

import httpx
import pytest

from school_library.errors import LookupFailed, NotFound
from school_library.library import Library


def test_new_library_is_empty(lib):
    assert lib.catalog.list() == ()
    assert lib.loans.list_all() == []


def test_demo_data_is_consistent(demo_lib):
    books = demo_lib.catalog.list()
    assert len(books) == 6
    for book in books:
        assert (book.status == "available") == (book.stock > 0)

    active = demo_lib.loans.list_active()
    assert {v.student_nis for v in active} == {"12345", "12346"}
    assert all(v.book.stock == 0 for v in active)
    assert [v.student_name for v in demo_lib.loans.list_returned()] == ["Budi Santoso"]


def test_demo_borrower_can_return(demo_lib):
    [view] = demo_lib.loans.find_active_by_borrower("12345")
    assert view.book.title == "Filosofi Teras"
    demo_lib.loans.return_loan(view.id)
    assert demo_lib.catalog.get("3").status == "available"


def test_statistics(demo_lib):
    stats = demo_lib.get_statistics()
    assert stats["total_books"] == 6
    assert stats["total_stock"] == 11
    assert stats["available_books"] == 4
    assert stats["active_loans"] == 2
    assert stats["returned_loans"] == 1
    assert stats["active_borrowers"] == 2
    assert stats["categories"] == {"Non-Fiction": 2, "History": 2, "Novel": 2}


def test_import_from_google_books(make_google_books):
    volumes = [
        {"id": "a", "volumeInfo": {"title": "Laskar Pelangi", "authors": ["Andrea Hirata"],
                                   "industryIdentifiers": [{"type": "ISBN_13", "identifier": "9789793062792"}]}},
        {"id": "b", "volumeInfo": {"title": "Tanpa Penulis"}},
        {"id": "c", "volumeInfo": {}},
    ]
    service = make_google_books(lambda request: httpx.Response(200, json={"items": volumes}))
    library = Library(seed=False, google_books=service)

    added = asyncio.run(library.import_from_google_books(queries=["novel"], stock=2))
    assert [b.title for b in added] == ["Laskar Pelangi", "Tanpa Penulis"]
    assert added[1].author == "Unknown Author"
    assert added[1].publisher == "Unknown Publisher"
    assert all(b.stock == 2 for b in added)

    # Same ISBN is not imported twice
    again = asyncio.run(library.import_from_google_books(queries=["novel"], stock=2))
    assert [b.title for b in again] == ["Tanpa Penulis"]


def test_add_book_from_lookup(make_google_books):
    volume = {"id": "a", "volumeInfo": {"title": "Bumi Manusia", "authors": ["Pramoedya Ananta Toer"],
                                        "categories": ["Fiction"]}}
    service = make_google_books(lambda request: httpx.Response(200, json={"items": [volume]}))
    library = Library(seed=False, google_books=service)

    book = asyncio.run(library.add_book_from_lookup("Bumi Manusia", stock=4, category="Novel"))
    assert book.category == "Novel"
    assert book.stock == 4
    assert library.catalog.get(book.id).title == "Bumi Manusia"


def test_add_book_from_lookup_without_result(make_google_books):
    service = make_google_books(lambda request: httpx.Response(200, json={"totalItems": 0}))
    library = Library(seed=False, google_books=service)
    with pytest.raises(NotFound):
        asyncio.run(library.add_book_from_lookup("nothing"))


def test_lookup_disabled(lib):
    lib.google_books = None
    with pytest.raises(LookupFailed):
        asyncio.run(lib.lookup("Laskar Pelangi"))


def test_close_releases_injected_http_client(make_google_books):
    service = make_google_books(lambda request: httpx.Response(200, json={}))
    library = Library(seed=False, google_books=service)
    asyncio.run(library.close())
    assert service._http_client.is_closed
