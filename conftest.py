import asyncio
import os
from datetime import date

import httpx
import pytest

# Keep tests offline and deterministic regardless of a developer's .env
os.environ.setdefault("SEED_DEMO_DATA", "False")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")

from school_library.library import Library  # noqa: E402
from school_library.services.google_books_service import GoogleBooksService  # noqa: E402
from school_library.services.http_client import LibraryHTTPClient  # noqa: E402
from school_library.utils.ui_helpers import OUTPUT_MODE_ENV  # noqa: E402

TODAY = date(2024, 2, 1)


@pytest.fixture(autouse=True)
def _plain_output(monkeypatch):
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)


@pytest.fixture
def lib():
    # Fresh, empty library for every test
    library = Library(seed=False, today=lambda: TODAY)
    yield library
    asyncio.run(library.close())


@pytest.fixture
def demo_lib():
    library = Library(seed=True, today=lambda: TODAY)
    yield library
    asyncio.run(library.close())


@pytest.fixture
def make_google_books():
    """Build a GoogleBooksService whose HTTP calls go to ``handler(request)``."""
    def factory(handler):
        client = LibraryHTTPClient(transport=httpx.MockTransport(handler))
        return GoogleBooksService(
            api_key="",
            http_client=client,
            base_url="https://books.example.test/books/v1",
            language="id",
            max_results=10,
        )
    return factory
