"""Build catalog search requests."""
from typing import Optional

from bookfinder.config import Config
from bookfinder.models import SearchRequest, SEARCH_FIELDS


def build_search_request(
    query: str,
    field: str = "title",
    page: int = 1,
    base_url: str = Config.SEARCH_URL
) -> Optional[SearchRequest]:
    """
    Turn user input into a request descriptor.

    Args:
        query: Free-text query; surrounding whitespace is ignored
        field: "title" or "author"
        page: 1-based page number
        base_url: Search endpoint

    Returns:
        SearchRequest, or None when the trimmed query is empty
    """
    if field not in SEARCH_FIELDS:
        raise ValueError(f"Unknown search field: {field!r}")
    if page < 1:
        raise ValueError(f"Page must be >= 1, got {page}")

    text = (query or "").strip()
    if not text:
        return None

    return SearchRequest(
        url=base_url,
        params=((field, text), ("page", str(page))),
        query=text,
        field=field,
        page=page,
    )
