"""
One search session per page mount.

SearchSession wires the filter state, context registry, query builder,
executor, facet catalog, URL sync and active-filter pills together and is the
contract UI collaborators talk to.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from facetsearch.active_filters import (
    SEARCH_TERM,
    ActiveFilterDescriptor,
    active_filter_count,
    derive_active_filters,
)
from facetsearch.config import SEARCH_DEBOUNCE_SECONDS, SEARCH_INDEX
from facetsearch.contexts import SearchContextConfig, SearchContextRegistry
from facetsearch.errors import SearchError, SearchErrorState, error_state
from facetsearch.executor import SearchExecutor
from facetsearch.facets import FacetCatalog
from facetsearch.filters import DateLike, FilterState, Number
from facetsearch.history import SearchHistory
from facetsearch.logging_utils import set_log_scope
from facetsearch.query_builder import QueryRequest, build_query_request
from facetsearch.records import DocumentRecord, SearchResult
from facetsearch.url_sync import InMemoryHistory, URLSync

logger = logging.getLogger(__name__)

DetailFetcher = Callable[[DocumentRecord], Awaitable[DocumentRecord]]


class SearchSession:
    def __init__(
        self,
        client,
        path: str = "/",
        navigation=None,
        registry: Optional[SearchContextRegistry] = None,
        catalog: Optional[FacetCatalog] = None,
        search_history: Optional[SearchHistory] = None,
        detail_fetcher: Optional[DetailFetcher] = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        index: str = SEARCH_INDEX,
    ):
        self.registry = registry or SearchContextRegistry(path=path)
        if self.registry.path != path:
            self.registry.switch(path)
        self.url_sync = URLSync(navigation or InMemoryHistory(path), pathname=path)
        self.executor = SearchExecutor(
            client, scope=self.context.scope, debounce_seconds=debounce_seconds
        )
        self.catalog = catalog or FacetCatalog(
            client, index=index, scope=self.context.scope
        )
        self.search_history = search_history
        self.detail_fetcher = detail_fetcher
        self.index = index
        self.state = FilterState()
        self.sort = self.context.default_sort
        self.selected_document: Optional[DocumentRecord] = None
        self.document_id: Optional[str] = None
        self.preview_error: Optional[SearchErrorState] = None
        set_log_scope(self.context.scope)

    # Context

    @property
    def context(self) -> SearchContextConfig:
        return self.registry.active

    @property
    def is_contextual(self) -> bool:
        return not self.registry.global_mode

    def placeholder(self) -> str:
        return self.registry.placeholder()

    def suggestions(self) -> List[str]:
        return self.registry.suggestions()

    # Results

    @property
    def results(self) -> List[DocumentRecord]:
        return self.executor.records

    @property
    def total(self) -> int:
        return self.executor.total

    @property
    def page(self) -> int:
        return self.executor.page

    @property
    def total_pages(self) -> int:
        return self.executor.total_pages

    @property
    def has_next_page(self) -> bool:
        return self.executor.has_next_page

    @property
    def is_loading(self) -> bool:
        return self.executor.is_loading

    @property
    def error(self) -> Optional[SearchErrorState]:
        return self.executor.error

    @property
    def active_filters(self) -> List[ActiveFilterDescriptor]:
        return derive_active_filters(self.state)

    @property
    def active_filter_count(self) -> int:
        return active_filter_count(self.state)

    def build_request(self, page: int = 1) -> QueryRequest:
        return build_query_request(
            self.state, self.context, page=page, sort=self.sort, index=self.index
        )

    # Lifecycle

    async def mount(self, load_facets: bool = True) -> Optional[SearchResult]:
        """Hydrate from the URL, load the facet catalog and run the first search."""
        url_state = self.url_sync.hydrate()
        self.state.set_search_term(url_state.search_term)
        self.document_id = url_state.document_id
        if url_state.global_search:
            self.registry.promote_to_global()
        if load_facets and not self.catalog.loaded:
            await self.catalog.load()
        return await self.executor.submit_now(self.build_request())

    async def switch_context(self, path: str) -> Optional[SearchResult]:
        """Move to another page: new context, fresh filter state, stale work dropped."""
        self.executor.cancel()
        self.registry.switch(path)
        self.executor.scope = self.context.scope
        self.catalog.scope = self.context.scope
        self.url_sync.navigate(path)
        self.state = FilterState()
        self.sort = self.context.default_sort
        self.selected_document = None
        set_log_scope(self.context.scope)
        return await self.mount(load_facets=False)

    async def promote_to_global(self) -> Optional[SearchResult]:
        self.registry.promote_to_global()
        self.executor.cancel()
        self.url_sync.reflect(global_search=True)
        if not self.state.search_term:
            return None
        return await self.executor.submit_now(self.build_request())

    # Filter edits (debounced)

    def _changed(self) -> asyncio.Task:
        return self.executor.schedule(self.build_request())

    def toggle(self, dimension: str, value: str) -> asyncio.Task:
        self.state.toggle(dimension, value)
        return self._changed()

    def set_dimension(self, dimension: str, values: Iterable[str]) -> asyncio.Task:
        self.state.set_dimension(dimension, values)
        return self._changed()

    def clear_dimension(self, dimension: str) -> asyncio.Task:
        self.state.clear_dimension(dimension)
        return self._changed()

    def set_date_range(self, start: DateLike, end: DateLike) -> asyncio.Task:
        self.state.set_date_range(start, end)
        return self._changed()

    def clear_date_range(self) -> asyncio.Task:
        self.state.clear_date_range()
        return self._changed()

    def set_value_range(self, low: Number, high: Number) -> asyncio.Task:
        self.state.set_value_range(low, high)
        return self._changed()

    def reset_value_range(self) -> asyncio.Task:
        self.state.reset_value_range()
        return self._changed()

    def set_search_term(self, term: str) -> asyncio.Task:
        self.state.set_search_term(term)
        self.url_sync.reflect(search_term=self.state.search_term)
        return self._changed()

    def set_sort(self, sort: str) -> asyncio.Task:
        self.sort = self.context.resolve_sort(sort)
        return self._changed()

    # Explicit actions (immediate)

    async def submit_search(
        self, term: Optional[str] = None
    ) -> Optional[SearchResult]:
        if term is not None:
            self.state.set_search_term(term)
            self.url_sync.reflect(search_term=self.state.search_term)
        if self.search_history is not None:
            self.search_history.record_search(self.state.search_term)
        return await self.executor.submit_now(self.build_request())

    async def remove_filter(
        self, descriptor: ActiveFilterDescriptor
    ) -> Optional[SearchResult]:
        if descriptor.state is not self.state:
            logger.warning(
                "Ignoring %s pill from a previous filter state", descriptor.kind
            )
            return None
        descriptor.remove()
        if descriptor.kind == SEARCH_TERM:
            self.url_sync.reflect(search_term="")
        return await self.executor.submit_now(self.build_request())

    async def clear_all(self) -> Optional[SearchResult]:
        logger.info("Clearing all filters for %s", self.context.scope)
        self.executor.cancel()
        self.state.clear()
        self.url_sync.clear()
        return await self.executor.submit_now(self.build_request())

    async def go_to_page(self, page: int) -> Optional[SearchResult]:
        return await self.executor.submit_now(self.build_request(page=page))

    async def load_more(self) -> Optional[SearchResult]:
        return await self.executor.load_more()

    async def retry(self) -> Optional[SearchResult]:
        return await self.executor.retry()

    def dismiss_error(self) -> None:
        self.executor.dismiss_error()
        self.preview_error = None

    async def refresh_facets(self):
        return await self.catalog.refresh()

    # Document preview

    async def select_document(
        self, record: DocumentRecord
    ) -> Optional[DocumentRecord]:
        """
        Open ``record`` for preview.

        The URL gets a new history entry; the complete record comes from the
        external detail fetcher when one is configured.
        """
        self.url_sync.reflect(document_id=str(record.id))
        self.document_id = str(record.id)
        if self.search_history is not None:
            self.search_history.record_view(_viewed_summary(record))

        if self.detail_fetcher is None:
            self.selected_document = record
            return record
        try:
            self.selected_document = await self.detail_fetcher(record)
        except SearchError as e:
            logger.error(
                "Error fetching full document %s for preview: %s", record.id, e
            )
            self.preview_error = error_state(e, self.context.scope)
            self.close_preview()
            return None
        return self.selected_document

    def close_preview(self) -> None:
        self.selected_document = None
        self.document_id = None
        self.url_sync.close_document()


def _viewed_summary(record: DocumentRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "unique_id": record.unique_id,
        "Document_Type": record.Document_Type,
        "Client_Name": record.Client_Name,
    }
