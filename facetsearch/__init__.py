"""Contextual faceted search and filter orchestration."""

from facetsearch.active_filters import (  # noqa: F401
    ActiveFilterDescriptor,
    active_filter_count,
    derive_active_filters,
)
from facetsearch.contexts import (  # noqa: F401
    GLOBAL_CONTEXT,
    SEARCH_CONTEXTS,
    SearchContextConfig,
    SearchContextRegistry,
)
from facetsearch.engine import SearchEngineClient  # noqa: F401
from facetsearch.errors import (  # noqa: F401
    ConnectivityError,
    EmptyCatalogError,
    QueryError,
    SearchError,
    SearchErrorState,
    StaleResponseDiscard,
)
from facetsearch.executor import SearchExecutor  # noqa: F401
from facetsearch.facets import FacetCatalog, FacetValue  # noqa: F401
from facetsearch.filters import FILTER_DIMENSIONS, FilterState  # noqa: F401
from facetsearch.query_builder import QueryRequest, build_query_request  # noqa: F401
from facetsearch.records import DocumentRecord, SearchResult, adapt_hit  # noqa: F401
from facetsearch.session import SearchSession  # noqa: F401
from facetsearch.url_sync import InMemoryHistory, URLSync  # noqa: F401
