import asyncio
import os
import time

from fastapi import APIRouter, HTTPException, Request

from facetsearch.active_filters import active_filter_count, derive_active_filters
from facetsearch.executor import SearchExecutor
from facetsearch.query_builder import build_query_request
from ui.backend.schemas import (
    ActiveFilter,
    ActiveFiltersResponse,
    FilterStateModel,
    SearchRequest,
    SearchResponse,
)
from ui.backend.utils.app_limits import get_rate_limits, limiter
from ui.backend.utils.app_state import get_engine_client, get_registry, logger
from ui.backend.utils.facet_helpers import build_facets_from_distribution

RATE_LIMIT_SEARCH, RATE_LIMIT_DEFAULT, _RATE_LIMIT_FACETS = get_rate_limits()
MAX_CONCURRENT_SEARCHES = int(os.environ.get("MAX_CONCURRENT_SEARCHES", "4"))
search_semaphore = asyncio.Semaphore(MAX_CONCURRENT_SEARCHES)
router = APIRouter()


def _resolve_context(request: Request, path: str, global_search: bool):
    context = get_registry(request).resolve(path)
    if global_search:
        context = context.model_copy(update={"default_filters": []})
    return context


@router.post("/search", response_model=SearchResponse)
@limiter.limit(RATE_LIMIT_SEARCH)
async def search(request: Request, body: SearchRequest):
    """
    Run one search for a filter state within a page context.

    Engine failures do not raise: the response carries an empty result set
    and a dismissable ``error``.
    """
    t0 = time.time()
    context = _resolve_context(request, body.path, body.global_search)
    state = body.filters.to_state()
    query_request = build_query_request(state, context, page=body.page, sort=body.sort)

    executor = SearchExecutor(get_engine_client(request), scope=context.scope)
    try:
        async with search_semaphore:
            await executor.submit_now(query_request)
    except Exception as e:
        logger.error(f"Search failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(
        "[TIMING] search: %.3fs (scope=%s, total=%d)",
        time.time() - t0,
        context.scope,
        executor.total,
    )
    return SearchResponse(
        results=executor.records,
        total=executor.total,
        page=executor.page,
        total_pages=executor.total_pages,
        query=query_request.query,
        scope=context.scope,
        filter=query_request.filter,
        facet_distribution=build_facets_from_distribution(executor.facet_distribution),
        processing_time_ms=executor.processing_time_ms,
        error=executor.error,
    )


@router.post("/active-filters", response_model=ActiveFiltersResponse)
@limiter.limit(RATE_LIMIT_DEFAULT)
def active_filters(request: Request, body: FilterStateModel):
    """Removable filter pills for a filter state, in display order."""
    state = body.to_state()
    pills = [ActiveFilter(**d.to_dict()) for d in derive_active_filters(state)]
    return ActiveFiltersResponse(filters=pills, count=active_filter_count(state))
