from typing import List

from fastapi import APIRouter, Request

from ui.backend.schemas import ContextConfig
from ui.backend.utils.app_limits import get_rate_limits, limiter
from ui.backend.utils.app_state import get_registry

_RATE_LIMIT_SEARCH, RATE_LIMIT_DEFAULT, _RATE_LIMIT_FACETS = get_rate_limits()
router = APIRouter()


@router.get("/")
@limiter.limit(RATE_LIMIT_DEFAULT)
def root(request: Request):
    """API root"""
    return {
        "name": "Document Faceted Search API",
        "version": "1.0.0",
        "endpoints": {
            "/search": "Search documents within a page context",
            "/active-filters": "Get removable filter pills for a filter state",
            "/facets": "Get filter facets",
            "/facets/refresh": "Re-run facet discovery",
            "/facets/{dimension}/options": "Search one dimension's values",
            "/contexts": "Get configured search contexts",
        },
    }


@router.get("/contexts", response_model=List[ContextConfig])
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_contexts(request: Request):
    """Get the search context configured for each page."""
    contexts_list = []
    for path, config in get_registry(request).contexts().items():
        contexts_list.append(
            ContextConfig(
                path=path,
                scope=config.scope,
                title=config.title,
                placeholder=config.placeholder,
                suggestions=config.suggestions,
                facets=config.facets,
                sort_options=config.sort_options,
                default_sort=config.default_sort,
                page_size=config.page_size,
                metadata={"default_filters": config.default_filters},
            )
        )
    return contexts_list


@router.get("/health")
def health():
    """Health check"""
    return {"status": "healthy"}
