"""HTTP client for the Open Library search API."""
import requests
from typing import Dict, Any
import logging

from bookfinder.models import SearchRequest

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Transport or HTTP failure talking to the catalog service."""


class OpenLibraryClient:
    """Client for Open Library search with a single request per call."""

    def __init__(
        self,
        timeout: int = 10,
        user_agent: str = "BookFinder/0.1.0"
    ):
        """
        Initialize Open Library client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout

        # Create session for connection pooling
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept": "application/json",
        })

    def search(self, request: SearchRequest) -> Dict[str, Any]:
        """
        Run one search request.

        Args:
            request: Descriptor from build_search_request

        Returns:
            Parsed JSON body

        Raises:
            CatalogError: on transport failure, non-2xx status or invalid JSON
        """
        logger.info(f"Request: {request.full_url}")

        try:
            response = self.session.get(
                request.url,
                params=list(request.params),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout: {request.full_url}")
            raise CatalogError("Request timed out")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Connection error: {e}")
            raise CatalogError(str(e) or "Network error") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"API error ({response.status_code}) for {request.full_url}")
            raise CatalogError(f"API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from catalog: {e}")
            raise CatalogError("Invalid response from catalog") from e

        logger.info(f"Success: {response.status_code}")
        return data

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
