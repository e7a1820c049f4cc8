import logging
import time
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import httpx

from school_library.book import DEFAULT_CATEGORY, BookDraft
from school_library.config import settings
from school_library.errors import LookupFailed
from school_library.services.http_client import LibraryHTTPClient, get_http_client
from school_library.utils.validators import ISBNValidator, TextValidator

logger = logging.getLogger(__name__)

# Seed queries used to fill an empty catalog with school-library titles
LIBRARY_QUERIES = (
    "buku indonesia novel",
    "buku sejarah indonesia",
    "buku sains populer",
    "buku pendidikan indonesia",
    "buku fiksi remaja indonesia",
)

# Checked in order against the first volume category, case-insensitive substring
CATEGORY_KEYWORDS = (
    ("fiction", "Fiction"),
    ("novel", "Novel"),
    ("history", "History"),
    ("science", "Science"),
    ("education", "Non-Fiction"),
    ("religion", "Religion"),
    ("technology", "Technology"),
    ("art", "Art"),
    ("sports", "Sports"),
    ("biography", "Biography"),
    ("comics", "Comics"),
)


def map_category(volume_categories: Optional[List[str]]) -> str:
    original = (volume_categories or [""])[0] or ""
    lowered = original.lower()
    for keyword, label in CATEGORY_KEYWORDS:
        if keyword in lowered:
            return label
    return DEFAULT_CATEGORY


def parse_year(published_date: Optional[str]) -> int:
    """Year from a Google Books date ('2005', '2005-07', '2005-07-01')."""
    try:
        return int((published_date or "")[:4])
    except ValueError:
        return date.today().year


def select_isbn(identifiers: Optional[List[Dict[str, Any]]]) -> str:
    by_type = {}
    for identifier in identifiers or []:
        by_type.setdefault(identifier.get("type"), identifier.get("identifier", ""))
    return by_type.get("ISBN_13") or by_type.get("ISBN_10") or ""


def secure_url(url: Optional[str]) -> str:
    if not url:
        return ""
    url = url.strip()
    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]
    return url


def volume_to_draft(volume: Dict[str, Any], stock: int = 1) -> BookDraft:
    """Map one Google Books volume record to a catalog draft."""
    info = volume.get("volumeInfo") or {}
    image_links = info.get("imageLinks") or {}
    return BookDraft(
        title=info.get("title") or "",
        author=", ".join(info.get("authors") or []),
        publisher=info.get("publisher") or "",
        year=parse_year(info.get("publishedDate")),
        category=map_category(info.get("categories")),
        description=TextValidator.sanitize_text(info.get("description")),
        cover_url=secure_url(image_links.get("thumbnail") or image_links.get("smallThumbnail")),
        isbn=select_isbn(info.get("industryIdentifiers")),
        stock=stock,
    )


class GoogleBooksService:
    """Client for the Google Books volumes search endpoint.

    Every failure (network error, timeout, non-2xx status, undecodable body) is
    raised as LookupFailed. Nothing is retried.
    """

    def __init__(self, api_key: Optional[str] = None, http_client: Optional[LibraryHTTPClient] = None,
                 base_url: Optional[str] = None, language: Optional[str] = None,
                 max_results: Optional[int] = None):
        self.api_key = api_key if api_key is not None else settings.google_books_api_key
        self.base_url = (base_url or settings.google_books_base_url).rstrip("/")
        self.language = language if language is not None else settings.google_books_language
        self.max_results = max_results or settings.google_books_max_results
        self._http_client = http_client

    async def _client(self) -> LibraryHTTPClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client()

    async def close(self) -> None:
        """Close an injected client. The shared client is closed by cleanup_http_client()."""
        if self._http_client is not None:
            await self._http_client.close()

    async def _make_api_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/volumes"
        if self.api_key:
            params["key"] = self.api_key

        client = await self._client()
        start_time = time.time()
        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            logger.error(f"Google Books request timed out: q={params.get('q')!r}")
            raise LookupFailed("Google Books request timed out") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Google Books request failed: {exc}")
            raise LookupFailed(f"Could not reach Google Books: {exc}") from exc

        response_time_ms = int((time.time() - start_time) * 1000)
        if not response.is_success:
            logger.error(f"Google Books returned {response.status_code} for q={params.get('q')!r}")
            raise LookupFailed(f"Google Books returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise LookupFailed("Google Books returned an invalid response body") from exc
        logger.debug(f"Google Books q={params.get('q')!r} answered in {response_time_ms} ms")
        return payload

    async def search_volumes(self, query: str) -> List[Dict[str, Any]]:
        """Raw volume records for a free-text query."""
        if not query or not query.strip():
            return []
        params = {"q": query.strip(), "maxResults": min(self.max_results, 40)}
        if self.language:
            params["langRestrict"] = self.language
        payload = await self._make_api_request(params)
        return payload.get("items") or []

    async def search_by_text(self, query: str) -> List[BookDraft]:
        """
        Search Google Books with a free-text query.

        Args:
            query: Title, author or any keywords

        Returns:
            Book drafts, in the order Google Books ranks them
        """
        volumes = await self.search_volumes(query)
        drafts = [volume_to_draft(volume) for volume in volumes]
        logger.info(f"Found {len(drafts)} candidates for query: {query}")
        return drafts

    async def search_by_isbn(self, isbn: str) -> Optional[BookDraft]:
        """
        Look up a single volume by ISBN.

        Args:
            isbn: ISBN-10 or ISBN-13, hyphens and spaces allowed

        Returns:
            The first matching draft, or None
        """
        clean_isbn = ISBNValidator.normalize_isbn(isbn)
        if not clean_isbn:
            return None
        payload = await self._make_api_request({"q": f"isbn:{clean_isbn}", "maxResults": 1})
        items = payload.get("items") or []
        if not items:
            logger.info(f"Book not found in Google Books: ISBN {clean_isbn}")
            return None
        return volume_to_draft(items[0])

    async def lookup(self, query: str) -> Optional[BookDraft]:
        """ISBN search first when the query looks like one, then free text."""
        if not query or not query.strip():
            return None
        query = query.strip()
        if ISBNValidator.looks_like_isbn(query):
            draft = await self.search_by_isbn(query)
            if draft:
                return draft
        results = await self.search_by_text(query)
        return results[0] if results else None

    async def fetch_library_books(self, queries: Iterable[str] = LIBRARY_QUERIES,
                                  stock: int = 1) -> List[BookDraft]:
        """Drafts for every volume returned by the seed queries, de-duplicated by volume id."""
        seen = set()
        drafts = []
        for query in queries:
            for volume in await self.search_volumes(query):
                volume_id = volume.get("id")
                if volume_id:
                    if volume_id in seen:
                        continue
                    seen.add(volume_id)
                drafts.append(volume_to_draft(volume, stock=stock))
        logger.info(f"Fetched {len(drafts)} library books from Google Books")
        return drafts
