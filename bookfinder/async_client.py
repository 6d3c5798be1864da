"""Async HTTP client for the Open Library search API."""
import httpx
from typing import Optional, Dict, Any
import logging

from bookfinder.client import CatalogError
from bookfinder.models import SearchRequest

logger = logging.getLogger(__name__)


class AsyncOpenLibraryClient:
    """Async client; several page requests may be in flight at once."""

    def __init__(
        self,
        timeout: int = 10,
        user_agent: str = "BookFinder/0.1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            timeout: Request timeout
            user_agent: User-Agent header
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.timeout = timeout

        # Create async HTTP client
        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            transport=transport,
        )

    async def search(self, request: SearchRequest) -> Dict[str, Any]:
        """
        Run one search request asynchronously.

        Raises:
            CatalogError: on transport failure, non-2xx status or invalid JSON
        """
        logger.info(f"Async request: {request.full_url}")
        try:
            response = await self.client.get(request.url, params=list(request.params))
        except httpx.TimeoutException:
            logger.warning(f"Timeout: {request.full_url}")
            raise CatalogError("Request timed out")
        except httpx.HTTPError as e:
            logger.warning(f"Async request failed: {e}")
            raise CatalogError(str(e) or "Network error") from e

        if not response.is_success:
            logger.warning(f"Status {response.status_code} for {request.full_url}")
            raise CatalogError(f"API error: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise CatalogError("Invalid response from catalog") from e

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
