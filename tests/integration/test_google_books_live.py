"""Live checks against the public Google Books API.

Deselected by default; run with ``pytest -m integration`` when online.
"""
import asyncio

import pytest

from school_library.services.google_books_service import GoogleBooksService
from school_library.services.http_client import LibraryHTTPClient

pytestmark = pytest.mark.integration


async def _with_service(coro_factory):
    service = GoogleBooksService(http_client=LibraryHTTPClient(), language="")
    try:
        return await coro_factory(service)
    finally:
        await service.close()


def test_search_by_isbn_live():
    draft = asyncio.run(_with_service(lambda s: s.search_by_isbn("9780306406157")))
    assert draft is not None
    assert draft.title


def test_search_by_text_live():
    drafts = asyncio.run(_with_service(lambda s: s.search_by_text("Laskar Pelangi")))
    assert drafts
    assert all(d.cover_url == "" or d.cover_url.startswith("https://") for d in drafts)
