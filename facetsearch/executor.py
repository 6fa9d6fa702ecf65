"""
Dispatch search requests and commit only the latest response.

Every dispatch takes a new generation number. When a response arrives, it is
applied only if its generation is still current; otherwise it is dropped
silently. Filter and text edits go through ``schedule`` (debounced), explicit
actions through ``submit_now``.
"""

import asyncio
import logging
from typing import List, Optional, Set

from facetsearch.config import SEARCH_DEBOUNCE_SECONDS, SEARCH_TIMEOUT_SECONDS
from facetsearch.errors import (
    ConnectivityError,
    SearchError,
    SearchErrorState,
    StaleResponseDiscard,
    error_state,
)
from facetsearch.query_builder import QueryRequest
from facetsearch.records import DocumentRecord, SearchResult, adapt_response

logger = logging.getLogger(__name__)


class SearchExecutor:
    def __init__(
        self,
        client,
        scope: str = "global",
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        timeout_seconds: float = SEARCH_TIMEOUT_SECONDS,
    ):
        self._client = client
        self.scope = scope
        self.debounce_seconds = debounce_seconds
        self.timeout_seconds = timeout_seconds
        self.generation = 0

        self.records: List[DocumentRecord] = []
        self.total = 0
        self.page = 1
        self.facet_distribution: dict = {}
        self.processing_time_ms = 0
        self.is_loading = False
        self.is_loading_more = False
        self.error: Optional[SearchErrorState] = None
        self.last_request: Optional[QueryRequest] = None
        # Last request that replaced the visible results; load_more never sets it.
        self.base_request: Optional[QueryRequest] = None
        self.last_result: Optional[SearchResult] = None

        self._timer: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def has_next_page(self) -> bool:
        if self.last_request is None or self.last_request.limit <= 0:
            return False
        return self.page * self.last_request.limit < self.total

    @property
    def total_pages(self) -> int:
        if self.last_request is None or self.last_request.limit <= 0:
            return 0
        return -(-self.total // self.last_request.limit)

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def check_current(self, generation: int) -> None:
        if not self.is_current(generation):
            raise StaleResponseDiscard(generation, self.generation)

    def schedule(self, request: QueryRequest) -> asyncio.Task:
        """Dispatch ``request`` after the quiet window; a newer call restarts it."""
        self._cancel_timer()
        task = asyncio.create_task(self._debounced(request))
        self._timer = task
        self._track(task)
        return task

    async def submit_now(self, request: QueryRequest) -> Optional[SearchResult]:
        """Bypass the debounce window (enter key, pill click, retry)."""
        self._cancel_timer()
        return await self._dispatch(request)

    async def retry(self) -> Optional[SearchResult]:
        """Re-run the last search that replaced the results."""
        if self.base_request is None:
            logger.info("Nothing to retry for %s", self.scope)
            return None
        logger.info("Retrying last %s search", self.scope)
        return await self.submit_now(self.base_request)

    async def load_more(self) -> Optional[SearchResult]:
        """Fetch the next page and append it to the visible records."""
        if self.is_loading or self.is_loading_more or not self.has_next_page:
            return None
        previous = self.last_request
        next_page = self.page + 1
        request = previous.model_copy(
            update={"page": next_page, "offset": (next_page - 1) * previous.limit}
        )
        return await self._dispatch(request, append=True)

    def cancel(self) -> None:
        """Discard the pending timer and any response still in flight."""
        self._cancel_timer()
        self.generation += 1
        self.is_loading = False
        self.is_loading_more = False

    def clear(self) -> None:
        self.cancel()
        self.records = []
        self.total = 0
        self.page = 1
        self.facet_distribution = {}
        self.error = None

    def dismiss_error(self) -> None:
        self.error = None

    async def flush(self) -> None:
        """Wait until every scheduled and in-flight dispatch has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _debounced(self, request: QueryRequest) -> Optional[SearchResult]:
        await asyncio.sleep(self.debounce_seconds)
        self._timer = None
        return await self._dispatch(request)

    async def _dispatch(
        self, request: QueryRequest, append: bool = False
    ) -> Optional[SearchResult]:
        self.generation += 1
        generation = self.generation
        self.last_request = request
        if append:
            self.is_loading_more = True
        else:
            self.base_request = request
            self.is_loading = True

        try:
            result = await self._run(request)
        except SearchError as e:
            if self.is_current(generation):
                self._fail(e)
            else:
                logger.debug("Dropping failure of superseded request: %s", e)
            return None
        finally:
            if self.is_current(generation):
                self.is_loading = False
                self.is_loading_more = False

        try:
            self.check_current(generation)
        except StaleResponseDiscard as e:
            logger.debug("Stale %s response: %s", self.scope, e)
            return None

        self._commit(result, append)
        return result

    async def _run(self, request: QueryRequest) -> SearchResult:
        logger.info(
            "Performing %s search: query=%r filter=%s page=%d",
            request.scope,
            request.query,
            request.filter,
            request.page,
        )
        try:
            payload = await asyncio.wait_for(
                self._client.search(
                    request.index, request.query, request.to_search_options()
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ConnectivityError("Search request timed out", "timeout") from e
        except SearchError:
            raise
        except Exception as e:
            raise SearchError(f"Search failed: {e}") from e
        return adapt_response(payload, request.query, request.scope, request.page)

    def _commit(self, result: SearchResult, append: bool) -> None:
        if append:
            self.records = self.records + result.records
        else:
            self.records = result.records
            self.total = result.total
            self.facet_distribution = result.facet_distribution
        self.page = result.page
        self.processing_time_ms = result.processing_time_ms
        self.last_result = result
        self.error = None
        logger.info(
            "Found %d results for %s (total %d, %dms)",
            len(result.records),
            result.scope,
            result.total,
            result.processing_time_ms,
        )

    def _fail(self, exc: SearchError) -> None:
        logger.error("%s search error: %s", self.scope, exc)
        self.records = []
        self.total = 0
        self.facet_distribution = {}
        self.error = error_state(exc, self.scope)

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
