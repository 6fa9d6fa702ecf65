from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from facetsearch.config import VALUE_RANGE_MAX, VALUE_RANGE_MIN
from facetsearch.errors import SearchErrorState
from facetsearch.facets import FacetValue
from facetsearch.filters import FilterState
from facetsearch.records import DocumentRecord


class FilterStateModel(BaseModel):
    """Wire form of a FilterState; dimension keys as in ``FILTER_DIMENSIONS``."""

    selections: Dict[str, List[str]] = {}
    date_start: Optional[date] = None
    date_end: Optional[date] = None
    value_min: float = VALUE_RANGE_MIN
    value_max: float = VALUE_RANGE_MAX
    search_term: str = ""

    def to_state(self) -> FilterState:
        return FilterState(
            selections=self.selections,
            date_range=(self.date_start, self.date_end),
            value_range=(self.value_min, self.value_max),
            search_term=self.search_term,
        )


class SearchRequest(BaseModel):
    path: str = "/content-management"
    filters: FilterStateModel = FilterStateModel()
    page: int = 1
    sort: Optional[str] = None
    global_search: bool = False


class SearchResponse(BaseModel):
    results: List[DocumentRecord]
    total: int
    page: int
    total_pages: int
    query: str
    scope: str
    filter: Optional[str] = None
    facet_distribution: Dict[str, Dict[str, int]] = {}
    processing_time_ms: int = 0
    error: Optional[SearchErrorState] = None


class Facets(BaseModel):
    facets: Dict[str, List[FacetValue]]
    filter_fields: Dict[str, str]
    error: Optional[SearchErrorState] = None


class ActiveFilter(BaseModel):
    kind: str
    label: str
    display_value: str
    dimension: Optional[str] = None
    value: Optional[str] = None


class ActiveFiltersResponse(BaseModel):
    filters: List[ActiveFilter]
    count: int


class ContextConfig(BaseModel):
    path: str
    scope: str
    title: str
    placeholder: str
    suggestions: List[str]
    facets: List[str]
    sort_options: List[str]
    default_sort: str
    page_size: int
    metadata: Dict[str, Any] = {}
