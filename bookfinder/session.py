"""Application root: search state, catalog client and favorites wired together."""
import logging
from typing import Optional

from bookfinder import state as transitions
from bookfinder.client import CatalogError
from bookfinder.config import Config
from bookfinder.favorites import FavoritesStore
from bookfinder.models import CatalogRecord, SearchRequest, SearchState

logger = logging.getLogger(__name__)


class BookFinderSession:
    """
    Drives the search state machine with a blocking catalog client.

    The favorites store is injected; the session never reaches for a
    global one. ``state`` always holds the latest immutable snapshot.
    """

    def __init__(
        self,
        client,
        favorites: FavoritesStore,
        config: Optional[Config] = None,
        field: str = "title",
        sort: str = "relevance"
    ):
        """
        Args:
            client: Object with search(SearchRequest) -> dict, raising CatalogError
            favorites: Favorites store
            config: Configuration (endpoints)
            field: Initial search field
            sort: Initial sort mode
        """
        self.client = client
        self.favorites = favorites
        self.config = config or Config()
        self.state: SearchState = transitions.initial_state(field, sort)

    def _run(self, request: Optional[SearchRequest]) -> SearchState:
        if request is None:
            return self.state

        request_id = self.state.request_id
        try:
            payload = self.client.search(request)
        except CatalogError as e:
            logger.error(f"Search failed: {e}")
            self.state = transitions.resolve_failure(self.state, request_id, str(e))
        else:
            self.state = transitions.resolve_success(self.state, request_id, payload)
            logger.info(
                f"Page {self.state.page}: {len(self.state.results)} of "
                f"{self.state.num_found} results"
            )
        return self.state

    def set_query(self, text: str) -> SearchState:
        self.state = transitions.set_query(self.state, text)
        return self.state

    def set_field(self, field: str) -> SearchState:
        self.state = transitions.set_field(self.state, field)
        return self.state

    def submit(
        self,
        query: Optional[str] = None,
        field: Optional[str] = None,
        page: int = 1
    ) -> SearchState:
        """Search from page 1, optionally updating the query and field first."""
        if query is not None:
            self.set_query(query)
        if field is not None:
            self.set_field(field)
        self.state, request = transitions.submit(self.state, self.config.SEARCH_URL, page)
        return self._run(request)

    def goto_page(self, page: int) -> SearchState:
        self.state, request = transitions.goto_page(self.state, page, self.config.SEARCH_URL)
        return self._run(request)

    def next_page(self) -> SearchState:
        return self.goto_page(self.state.page + 1)

    def previous_page(self) -> SearchState:
        return self.goto_page(self.state.page - 1)

    def change_sort(self, mode: str) -> SearchState:
        self.state = transitions.change_sort(self.state, mode)
        return self.state

    def select_record(self, record: CatalogRecord) -> SearchState:
        self.state = transitions.select_record(self.state, record)
        return self.state

    def show_favorites(self) -> SearchState:
        self.state = transitions.show_favorites(self.state)
        return self.state

    def show_results(self) -> SearchState:
        self.state = transitions.show_results(self.state)
        return self.state

    def is_favorite(self, record: CatalogRecord) -> bool:
        return self.favorites.is_favorite(record)

    def toggle_favorite(self, record: CatalogRecord) -> bool:
        return self.favorites.toggle_favorite(record)


class AsyncBookFinderSession(BookFinderSession):
    """
    Same as BookFinderSession with an async client.

    Searches may overlap; a response that arrives after a newer search
    was started is discarded.
    """

    async def _run_async(self, request: Optional[SearchRequest]) -> SearchState:
        if request is None:
            return self.state

        request_id = self.state.request_id
        try:
            payload = await self.client.search(request)
        except CatalogError as e:
            logger.error(f"Search failed: {e}")
            self.state = transitions.resolve_failure(self.state, request_id, str(e))
        else:
            if not transitions.is_current(self.state, request_id):
                logger.info(f"Discarding superseded response for page {request.page}")
            self.state = transitions.resolve_success(self.state, request_id, payload)
        return self.state

    async def submit(
        self,
        query: Optional[str] = None,
        field: Optional[str] = None,
        page: int = 1
    ) -> SearchState:
        if query is not None:
            self.set_query(query)
        if field is not None:
            self.set_field(field)
        self.state, request = transitions.submit(self.state, self.config.SEARCH_URL, page)
        return await self._run_async(request)

    async def goto_page(self, page: int) -> SearchState:
        self.state, request = transitions.goto_page(self.state, page, self.config.SEARCH_URL)
        return await self._run_async(request)

    async def next_page(self) -> SearchState:
        return await self.goto_page(self.state.page + 1)

    async def previous_page(self) -> SearchState:
        return await self.goto_page(self.state.page - 1)
