"""Tests for search state transitions."""
import pytest

from bookfinder import state as st
from bookfinder.models import CatalogRecord, IDLE, LOADING, SUCCESS, ERROR

PAYLOAD = {
    "numFound": 3,
    "docs": [
        {"title": "Middle", "first_publish_year": 1990},
        {"title": "Unknown"},
        {"title": "Oldest", "first_publish_year": 1950},
    ],
}


def loaded(sort="relevance"):
    state = st.set_query(st.initial_state(sort=sort), "books")
    state, _ = st.submit(state)
    return st.resolve_success(state, state.request_id, PAYLOAD)


def test_initial_state():
    state = st.initial_state()
    assert state.status == IDLE
    assert state.page == 1
    assert state.results == ()
    assert state.error is None


def test_initial_state_rejects_unknown_values():
    with pytest.raises(ValueError):
        st.initial_state(field="isbn")
    with pytest.raises(ValueError):
        st.initial_state(sort="title")


def test_query_change_resets_page():
    state = st.goto_page(loaded(), 4)[0]
    assert state.page == 4

    state = st.set_query(state, "other")
    assert state.page == 1


def test_field_change_resets_page():
    state, _ = st.goto_page(loaded(), 3)
    state = st.set_field(state, "author")
    assert state.field == "author"
    assert state.page == 1


def test_submit_blank_query_is_ignored():
    state = st.set_query(st.initial_state(), "   ")
    new_state, request = st.submit(state)
    assert request is None
    assert new_state is state


def test_submit_starts_loading():
    state = st.set_query(st.initial_state(), " Dune ")
    state, request = st.submit(state)

    assert state.status == LOADING
    assert state.loading
    assert state.page == 1
    assert state.request_id is not None
    assert dict(request.params) == {"title": "Dune", "page": "1"}


def test_submit_clears_error_and_selection():
    state = st.set_query(st.initial_state(), "Dune")
    state, _ = st.submit(state)
    state = st.resolve_failure(state, state.request_id, "API error: 500")
    state = st.show_favorites(state)

    state, _ = st.submit(state)

    assert state.error is None
    assert state.selected is None


def test_resolve_success():
    state = loaded()
    assert state.status == SUCCESS
    assert state.num_found == 3
    assert [r.title for r in state.results] == ["Middle", "Unknown", "Oldest"]
    assert state.request_id is None


def test_resolve_success_applies_current_sort():
    state = loaded(sort="year-asc")
    assert [r.title for r in state.results] == ["Oldest", "Middle", "Unknown"]


def test_resolve_failure_clears_results():
    state = loaded()
    state, _ = st.next_page(state)
    state = st.resolve_failure(state, state.request_id, "API error: 500")

    assert state.status == ERROR
    assert state.error == "API error: 500"
    assert state.results == ()
    assert state.num_found == 0


def test_change_sort_reorders_without_request():
    state = loaded()
    state = st.change_sort(state, "year-desc")

    assert state.status == SUCCESS
    assert state.sort == "year-desc"
    assert [r.title for r in state.results] == ["Middle", "Oldest", "Unknown"]


def test_change_sort_back_to_relevance_restores_service_order():
    state = st.change_sort(loaded(), "year-asc")
    state = st.change_sort(state, "relevance")
    assert [r.title for r in state.results] == ["Middle", "Unknown", "Oldest"]


def test_paging_reuses_last_query_and_field():
    state = st.set_field(st.set_query(st.initial_state(), "Tolkien"), "author")
    state, _ = st.submit(state)
    state = st.resolve_success(state, state.request_id, PAYLOAD)

    # Editing the box without submitting does not change what pages load
    state = st.set_query(state, "Lewis")
    state, request = st.goto_page(state, 2)

    assert dict(request.params) == {"author": "Tolkien", "page": "2"}
    assert state.page == 2


def test_previous_page_clamped_at_one():
    state = loaded()
    new_state, request = st.previous_page(state)
    assert request is None
    assert new_state is state


def test_paging_before_any_search_is_ignored():
    state = st.initial_state()
    new_state, request = st.next_page(state)
    assert request is None
    assert new_state is state


def test_superseded_response_is_dropped():
    state = loaded()
    state, first = st.next_page(state)
    first_id = state.request_id
    state, second = st.next_page(state)

    assert second.page == 3
    stale = st.resolve_success(state, first_id, {"numFound": 1, "docs": [{"title": "Stale"}]})
    assert stale is state

    state = st.resolve_success(state, state.request_id, {"numFound": 1, "docs": [{"title": "Fresh"}]})
    assert [r.title for r in state.results] == ["Fresh"]
    assert state.page == 3


def test_superseded_failure_is_dropped():
    state = loaded()
    state, _ = st.next_page(state)
    first_id = state.request_id
    state, _ = st.next_page(state)

    assert st.resolve_failure(state, first_id, "late error") is state


def test_selection_is_independent_of_status():
    state = loaded()
    record = state.results[0]

    state = st.select_record(state, record)
    assert state.selected.kind == "record"
    assert state.selected.record == record
    assert state.status == SUCCESS

    state = st.show_favorites(state)
    assert state.showing_favorites
    assert state.results

    state = st.show_results(state)
    assert state.selected is None


def test_snapshots_are_immutable():
    state = st.initial_state()
    with pytest.raises(AttributeError):
        state.page = 5


def test_snapshots_are_hashable():
    """Records built from lists still end up fully immutable."""
    state = loaded()
    record = CatalogRecord(title="Dune", author_name=["Frank Herbert"], isbn=["0441013597"])

    assert isinstance(record.author_name, tuple)
    assert isinstance(record.isbn, tuple)
    assert hash(state) == hash(loaded())
    assert hash(st.select_record(state, record)) is not None
