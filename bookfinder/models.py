"""Data models for catalog records, favorites and search state."""
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple
from urllib.parse import urlencode


SEARCH_FIELDS = ("title", "author")
SORT_MODES = ("relevance", "year-asc", "year-desc")

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"


def _str_tuple(value) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v) for v in value)


def _int_or_none(value) -> Optional[int]:
    # bool is an int subclass; a JSON true is not a year
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _str_or_none(value) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class CatalogRecord:
    """A single search doc as returned by the catalog service."""
    title: str
    author_name: Tuple[str, ...] = ()
    first_publish_year: Optional[int] = None
    cover_i: Optional[int] = None
    isbn: Tuple[str, ...] = ()
    publisher: Tuple[str, ...] = ()
    subject: Tuple[str, ...] = ()
    key: Optional[str] = None
    cover_edition_key: Optional[str] = None

    def __post_init__(self):
        for name in ("author_name", "isbn", "publisher", "subject"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "CatalogRecord":
        """Build a record from a raw ``docs`` entry, tolerating missing fields."""
        title = doc.get("title")
        return cls(
            title=str(title) if title is not None else "",
            author_name=_str_tuple(doc.get("author_name")),
            first_publish_year=_int_or_none(doc.get("first_publish_year")),
            cover_i=_int_or_none(doc.get("cover_i")),
            isbn=_str_tuple(doc.get("isbn")),
            publisher=_str_tuple(doc.get("publisher")),
            subject=_str_tuple(doc.get("subject")),
            key=_str_or_none(doc.get("key")),
            cover_edition_key=_str_or_none(doc.get("cover_edition_key")),
        )

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.author_name)


@dataclass(frozen=True)
class FavoriteRecord:
    """The reduced projection of a record stored in the favorites list."""
    key: str
    title: str
    author_name: Tuple[str, ...] = ()
    year: Optional[int] = None
    cover_i: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "author_name", tuple(self.author_name))

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape; absent year and cover are left out."""
        data: Dict[str, Any] = {
            "key": self.key,
            "title": self.title,
            "author_name": list(self.author_name),
        }
        if self.year is not None:
            data["year"] = self.year
        if self.cover_i is not None:
            data["cover_i"] = self.cover_i
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FavoriteRecord":
        """
        Rebuild a favorite from its persisted shape.

        Raises:
            ValueError: if the entry has no string key
        """
        if not isinstance(data, dict) or not isinstance(data.get("key"), str):
            raise ValueError(f"Invalid favorite entry: {data!r}")
        title = data.get("title")
        return cls(
            key=data["key"],
            title=str(title) if title is not None else "",
            author_name=_str_tuple(data.get("author_name")),
            year=_int_or_none(data.get("year")),
            cover_i=_int_or_none(data.get("cover_i")),
        )

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.author_name)


@dataclass(frozen=True)
class SearchRequest:
    """Request descriptor for one catalog search."""
    url: str
    params: Tuple[Tuple[str, str], ...]
    query: str
    field: str
    page: int

    @property
    def full_url(self) -> str:
        return f"{self.url}?{urlencode(self.params)}"


@dataclass(frozen=True)
class Selection:
    """What the user is looking at besides the result list."""
    kind: str  # "record" or "favorites"
    record: Optional[CatalogRecord] = None


FAVORITES_VIEW = Selection("favorites")


@dataclass(frozen=True)
class SearchState:
    """Immutable snapshot of a search session."""
    query: str = ""
    field: str = "title"
    sort: str = "relevance"
    page: int = 1
    results: Tuple[CatalogRecord, ...] = ()
    # Results in the order the service returned them
    service_results: Tuple[CatalogRecord, ...] = ()
    num_found: int = 0
    status: str = IDLE
    error: Optional[str] = None
    selected: Optional[Selection] = None
    # Token of the request currently in flight, if any
    request_id: Optional[int] = None
    next_request_id: int = 1
    # Query and field of the last submitted search, reused for paging
    last_query: Optional[str] = None
    last_field: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status == LOADING

    @property
    def showing_favorites(self) -> bool:
        return self.selected is not None and self.selected.kind == "favorites"
