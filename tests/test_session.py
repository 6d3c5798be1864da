"""End-to-end tests for the search session with fake catalog clients."""
import asyncio
import json

import httpx

from bookfinder.async_client import AsyncOpenLibraryClient
from bookfinder.client import CatalogError
from bookfinder.favorites import FavoritesStore
from bookfinder.models import SUCCESS, ERROR, IDLE
from bookfinder.session import BookFinderSession, AsyncBookFinderSession
from bookfinder.storage import MemoryStorage

DUNE_RESPONSE = {
    "numFound": 2,
    "docs": [
        {"key": "/works/OL1W", "title": "Dune", "author_name": ["Frank Herbert"],
         "first_publish_year": 1965, "cover_i": 12345},
        {"key": "/works/OL2W", "title": "Dune Messiah", "author_name": ["Frank Herbert"],
         "first_publish_year": 1969},
    ],
}


class FakeClient:
    """Returns queued responses; a CatalogError in the queue is raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def search(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_session(*responses):
    storage = MemoryStorage()
    client = FakeClient(*responses)
    return BookFinderSession(client, FavoritesStore(storage)), client, storage


def test_submit_success():
    """Searching "Dune" by title loads both docs on page 1."""
    session, client, _ = make_session(DUNE_RESPONSE)

    state = session.submit("Dune", field="title")

    assert state.status == SUCCESS
    assert state.page == 1
    assert len(state.results) == 2
    assert state.num_found == 2
    assert dict(client.requests[0].params) == {"title": "Dune", "page": "1"}


def test_blank_submit_sends_nothing():
    session, client, _ = make_session()

    state = session.submit("   ")

    assert state.status == IDLE
    assert state.error is None
    assert client.requests == []


def test_http_error_then_recovery():
    """An HTTP 500 clears results; the next good search clears the error."""
    session, _, _ = make_session(DUNE_RESPONSE, CatalogError("API error: 500"), DUNE_RESPONSE)
    session.submit("Dune")

    state = session.next_page()
    assert state.status == ERROR
    assert state.error == "API error: 500"
    assert state.results == ()
    assert state.num_found == 0

    state = session.submit("Dune")
    assert state.status == SUCCESS
    assert state.error is None
    assert len(state.results) == 2


def test_sort_change_does_not_refetch():
    """Sorting by year-desc moves the undated record last without a request."""
    response = {"numFound": 3, "docs": [
        {"title": "Undated"},
        {"title": "Old", "first_publish_year": 1900},
        {"title": "New", "first_publish_year": 2020},
    ]}
    session, client, _ = make_session(response)
    session.submit("anything")

    state = session.change_sort("year-desc")

    assert [r.title for r in state.results] == ["New", "Old", "Undated"]
    assert state.status == SUCCESS
    assert len(client.requests) == 1


def test_paging():
    session, client, _ = make_session(DUNE_RESPONSE, DUNE_RESPONSE, DUNE_RESPONSE)
    session.submit("Dune", field="author")

    assert session.next_page().page == 2
    assert session.previous_page().page == 1
    session.previous_page()

    assert [r.page for r in client.requests] == [1, 2, 1]
    assert all(r.field == "author" for r in client.requests)


def test_favorite_persists_projection():
    """Favoriting a result writes its cover id and year to storage."""
    session, _, storage = make_session(DUNE_RESPONSE)
    session.submit("Dune")
    dune = session.state.results[0]

    assert session.toggle_favorite(dune) is True
    assert session.is_favorite(dune)

    saved = json.loads(storage.get_item("bf_favorites"))
    assert len(saved) == 1
    assert saved[0]["cover_i"] == 12345
    assert saved[0]["year"] == 1965


def test_favorites_survive_new_session():
    session, _, storage = make_session(DUNE_RESPONSE)
    session.submit("Dune")
    session.toggle_favorite(session.state.results[1])

    reopened = FavoritesStore(storage)
    assert [f.title for f in reopened] == ["Dune Messiah"]


def test_selection_views():
    session, _, _ = make_session(DUNE_RESPONSE)
    session.submit("Dune")

    session.select_record(session.state.results[0])
    assert session.state.selected.record.title == "Dune"

    assert session.show_favorites().showing_favorites
    assert session.show_results().selected is None


def test_async_session_drops_superseded_page():
    """A slow page-2 response arriving after page 3 does not overwrite it."""
    async def handler(request):
        page = request.url.params["page"]
        if page == "2":
            await page_two_release.wait()
        return httpx.Response(200, json={
            "numFound": 100,
            "docs": [{"title": f"Page {page}"}],
        })

    page_two_release = None

    async def go():
        nonlocal page_two_release
        page_two_release = asyncio.Event()
        async with AsyncOpenLibraryClient(transport=httpx.MockTransport(handler)) as client:
            session = AsyncBookFinderSession(client, FavoritesStore(MemoryStorage()))
            await session.submit("Dune")

            slow = asyncio.ensure_future(session.next_page())
            await asyncio.sleep(0)
            await session.next_page()
            page_two_release.set()
            await slow
            return session.state

    state = asyncio.run(go())

    assert state.page == 3
    assert [r.title for r in state.results] == ["Page 3"]
    assert state.status == SUCCESS


def test_async_session_error():
    async def go():
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        async with AsyncOpenLibraryClient(transport=transport) as client:
            session = AsyncBookFinderSession(client, FavoritesStore(MemoryStorage()))
            return await session.submit("Dune")

    state = asyncio.run(go())

    assert state.status == ERROR
    assert state.error == "API error: 500"
    assert state.results == ()
