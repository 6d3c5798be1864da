"""
Search state transitions.

Every function takes a SearchState and returns a new one; nothing here
performs I/O. A search is started by ``submit`` or ``goto_page``, which
hand back the request to run and record its token in ``request_id``.
The caller later reports the outcome with ``resolve_success`` or
``resolve_failure`` and that token. An outcome whose token is no longer
the one in flight has been superseded by a newer request and is dropped.
"""
from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from bookfinder.config import Config
from bookfinder.models import (
    SearchState, SearchRequest, Selection, FAVORITES_VIEW, CatalogRecord,
    SEARCH_FIELDS, SORT_MODES, IDLE, LOADING, SUCCESS, ERROR,
)
from bookfinder.parse import parse_search_response
from bookfinder.query import build_search_request
from bookfinder.results import sort_records

Transition = Tuple[SearchState, Optional[SearchRequest]]


def initial_state(field: str = "title", sort: str = "relevance") -> SearchState:
    if field not in SEARCH_FIELDS:
        raise ValueError(f"Unknown search field: {field!r}")
    if sort not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {sort!r}")
    return SearchState(field=field, sort=sort, status=IDLE)


def set_query(state: SearchState, text: str) -> SearchState:
    """Edit the query text; a different query goes back to page 1."""
    if text == state.query:
        return state
    return replace(state, query=text, page=1)


def set_field(state: SearchState, field: str) -> SearchState:
    if field not in SEARCH_FIELDS:
        raise ValueError(f"Unknown search field: {field!r}")
    if field == state.field:
        return state
    return replace(state, field=field, page=1)


def change_sort(state: SearchState, mode: str) -> SearchState:
    """
    Re-sort the results already held; no request is made.

    Sorting always starts from the service's order, so switching back
    to "relevance" restores it.
    """
    if mode not in SORT_MODES:
        raise ValueError(f"Unknown sort mode: {mode!r}")
    results = tuple(sort_records(state.service_results, mode))
    return replace(state, sort=mode, results=results)


def _start(state: SearchState, request: SearchRequest) -> SearchState:
    return replace(
        state,
        page=request.page,
        status=LOADING,
        error=None,
        selected=None,
        request_id=state.next_request_id,
        next_request_id=state.next_request_id + 1,
        last_query=request.query,
        last_field=request.field,
    )


def submit(state: SearchState, base_url: str = Config.SEARCH_URL, page: int = 1) -> Transition:
    """Start a new search, from page 1 unless told otherwise; a blank query is ignored."""
    request = build_search_request(state.query, state.field, page, base_url)
    if request is None:
        return state, None
    return _start(state, request), request


def goto_page(state: SearchState, page: int, base_url: str = Config.SEARCH_URL) -> Transition:
    """
    Load another page of the last submitted search.

    Pages below 1 and paging before any search are ignored.
    """
    if page < 1 or not state.last_query:
        return state, None
    request = build_search_request(state.last_query, state.last_field, page, base_url)
    if request is None:
        return state, None
    return _start(state, request), request


def next_page(state: SearchState, base_url: str = Config.SEARCH_URL) -> Transition:
    return goto_page(state, state.page + 1, base_url)


def previous_page(state: SearchState, base_url: str = Config.SEARCH_URL) -> Transition:
    return goto_page(state, state.page - 1, base_url)


def is_current(state: SearchState, request_id: int) -> bool:
    return state.request_id is not None and state.request_id == request_id


def resolve_success(state: SearchState, request_id: int, payload: Dict[str, Any]) -> SearchState:
    """Apply a search response, sorted by the current sort mode."""
    if not is_current(state, request_id):
        return state
    records, num_found = parse_search_response(payload)
    service_results = tuple(records)
    return replace(
        state,
        service_results=service_results,
        results=tuple(sort_records(service_results, state.sort)),
        num_found=num_found,
        status=SUCCESS,
        error=None,
        request_id=None,
    )


def resolve_failure(state: SearchState, request_id: int, message: str) -> SearchState:
    """Record a failed search: results are cleared and the message shown."""
    if not is_current(state, request_id):
        return state
    return replace(
        state,
        service_results=(),
        results=(),
        num_found=0,
        status=ERROR,
        error=message or "Unknown error",
        request_id=None,
    )


def select_record(state: SearchState, record: CatalogRecord) -> SearchState:
    return replace(state, selected=Selection("record", record))


def show_favorites(state: SearchState) -> SearchState:
    return replace(state, selected=FAVORITES_VIEW)


def show_results(state: SearchState) -> SearchState:
    return replace(state, selected=None)
