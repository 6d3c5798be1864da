"""Sorting and presentation fields for search results."""
import math
from typing import Dict, Any, Optional, Sequence

from bookfinder.config import Config
from bookfinder.models import CatalogRecord, FavoriteRecord, SORT_MODES

EMPTY = "—"
MAX_PUBLISHERS = 3
MAX_SUBJECTS = 8


def identity_key(record: CatalogRecord) -> str:
    """
    Stable key used to match a book across results and favorites.

    Prefers the catalog key, then the cover edition key, then
    ``"{title}-{first author}"``.
    """
    if record.key:
        return record.key
    if record.cover_edition_key:
        return record.cover_edition_key
    first_author = record.author_name[0] if record.author_name else "?"
    return f"{record.title}-{first_author}"


def publish_year(record: CatalogRecord) -> Optional[int]:
    year = record.first_publish_year
    if isinstance(year, int) and not isinstance(year, bool):
        return year
    return None


def sort_records(records: Sequence[CatalogRecord], mode: str) -> Sequence[CatalogRecord]:
    """
    Order records by the given sort mode.

    "relevance" returns ``records`` itself, in the service's order.
    Year modes return a stable-sorted copy with unknown years last
    in both directions.
    """
    if mode not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {mode!r}")
    if mode == "relevance" or not records:
        return records

    descending = mode == "year-desc"
    missing = -math.inf if descending else math.inf

    def year_key(record):
        year = publish_year(record)
        return missing if year is None else year

    return sorted(records, key=year_key, reverse=descending)


def cover_url(record: CatalogRecord, base: str = Config.COVERS_URL) -> Optional[str]:
    """Cover image URL by cover id, else by first ISBN, else None."""
    if record.cover_i:
        return f"{base}/b/id/{record.cover_i}-M.jpg"
    if record.isbn:
        return f"{base}/b/isbn/{record.isbn[0]}-M.jpg"
    return None


def favorite_cover_url(favorite: FavoriteRecord, base: str = Config.COVERS_URL) -> Optional[str]:
    if favorite.cover_i:
        return f"{base}/b/id/{favorite.cover_i}-M.jpg"
    return None


def format_authors(names: Sequence[str]) -> str:
    return ", ".join(names)


def format_year(year: Optional[int]) -> str:
    return str(year) if year else EMPTY


def details(record: CatalogRecord, base: str = Config.COVERS_URL) -> Dict[str, Any]:
    """Fields shown in the detail view of a single record."""
    return {
        "title": record.title,
        "authors": format_authors(record.author_name),
        "year": format_year(record.first_publish_year),
        "publishers": ", ".join(record.publisher[:MAX_PUBLISHERS]) or EMPTY,
        "subjects": ", ".join(record.subject[:MAX_SUBJECTS]),
        "cover_url": cover_url(record, base),
        "key": identity_key(record),
    }
