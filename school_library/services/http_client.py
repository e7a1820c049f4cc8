import logging
from typing import Optional

import httpx

from school_library.config import settings

logger = logging.getLogger(__name__)


class LibraryHTTPClient:
    """Pooled async HTTP client shared by the external service clients."""

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        limits = httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0
        )
        read_timeout = timeout if timeout is not None else settings.google_books_timeout
        timeout_config = httpx.Timeout(
            timeout=read_timeout,
            connect=5.0,
        )
        self._client = httpx.AsyncClient(
            limits=limits,
            timeout=timeout_config,
            follow_redirects=True,
            transport=transport,
        )

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self._client.get(url, **kwargs)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self):
        await self._client.aclose()


# Process-wide client instance
_global_client: Optional[LibraryHTTPClient] = None


async def get_http_client() -> LibraryHTTPClient:
    """Return the shared client, creating it on first use."""
    global _global_client
    if _global_client is None or _global_client.is_closed:
        _global_client = LibraryHTTPClient()
    return _global_client


async def cleanup_http_client():
    """Close the shared client (called on application shutdown)."""
    global _global_client
    if _global_client:
        await _global_client.close()
        _global_client = None
        logger.debug("Shared HTTP client closed")
