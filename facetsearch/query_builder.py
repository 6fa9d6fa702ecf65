"""Compile a FilterState into a search engine request."""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from facetsearch.config import DATE_FIELD, SEARCH_INDEX, VALUE_FIELD
from facetsearch.contexts import SearchContextConfig
from facetsearch.filters import FILTER_DIMENSIONS, FilterState, normalize_date_range


class QueryRequest(BaseModel):
    index: str = SEARCH_INDEX
    query: str = ""
    scope: str = "global"
    page: int = 1
    offset: int = 0
    limit: int = 10
    sort: List[str] = []
    filter: Optional[str] = None
    facets: List[str] = []
    attributes_to_retrieve: List[str] = []
    attributes_to_highlight: List[str] = []
    highlight_pre_tag: Optional[str] = None
    highlight_post_tag: Optional[str] = None
    attributes_to_crop: List[str] = []
    crop_length: Optional[int] = None

    def to_search_options(self) -> Dict[str, Any]:
        """Engine option names, leaving out anything unset."""
        options: Dict[str, Any] = {"offset": self.offset, "limit": self.limit}
        if self.sort:
            options["sort"] = self.sort
        if self.filter:
            options["filter"] = self.filter
        if self.facets:
            options["facets"] = self.facets
        if self.attributes_to_retrieve:
            options["attributesToRetrieve"] = self.attributes_to_retrieve
        if self.attributes_to_highlight:
            options["attributesToHighlight"] = self.attributes_to_highlight
            options["highlightPreTag"] = self.highlight_pre_tag
            options["highlightPostTag"] = self.highlight_post_tag
        if self.attributes_to_crop:
            options["attributesToCrop"] = self.attributes_to_crop
            if self.crop_length is not None:
                options["cropLength"] = self.crop_length
        return options


def quote_value(value: str) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_or_group(field: str, values: List[str]) -> str:
    """``(F = "a" OR F = "b")`` for one dimension's selection."""
    return "(" + " OR ".join(f"{field} = {quote_value(v)}" for v in values) + ")"


def build_date_clause(
    start: Optional[date], end: Optional[date], field: str = DATE_FIELD
) -> Optional[str]:
    """Day-granularity range; dropped unless both bounds are set."""
    start, end = normalize_date_range(start, end)
    if start is None or end is None:
        return None
    return (
        f"{field} >= {quote_value(start.isoformat())} AND "
        f"{field} <= {quote_value(end.isoformat())}"
    )


def build_value_clause(state: FilterState, field: str = VALUE_FIELD) -> Optional[str]:
    """Numeric range, elided when it spans the unconstrained default."""
    if state.is_default_value_range():
        return None
    low, high = state.value_range
    return f"{field} >= {_format_number(low)} AND {field} <= {_format_number(high)}"


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_filter_clauses(
    state: FilterState, context: Optional[SearchContextConfig] = None
) -> List[str]:
    clauses: List[str] = []
    if context is not None:
        clauses.extend(c for c in context.default_filters if c)

    date_clause = build_date_clause(*state.date_range)
    if date_clause:
        clauses.append(date_clause)

    value_clause = build_value_clause(state)
    if value_clause:
        clauses.append(value_clause)

    for dimension in FILTER_DIMENSIONS:
        values = state.selections[dimension.key]
        if values:
            clauses.append(build_or_group(dimension.field, values))
    return clauses


def build_filter_expression(
    state: FilterState, context: Optional[SearchContextConfig] = None
) -> Optional[str]:
    """AND-join every applicable clause; None when nothing applies."""
    clauses = build_filter_clauses(state, context)
    if not clauses:
        return None
    return " AND ".join(clauses)


def build_query_request(
    state: FilterState,
    context: SearchContextConfig,
    page: int = 1,
    sort: Optional[str] = None,
    search_term: Optional[str] = None,
    index: str = SEARCH_INDEX,
) -> QueryRequest:
    """
    Build the request for one page of results.

    ``search_term`` overrides ``state.search_term`` when given, so a caller can
    search for text that has not been committed to the state yet.
    """
    page = max(page, 1)
    query = state.search_term if search_term is None else search_term
    return QueryRequest(
        index=index,
        query=query or "",
        scope=context.scope,
        page=page,
        offset=(page - 1) * context.page_size,
        limit=context.page_size,
        sort=[context.resolve_sort(sort)],
        filter=build_filter_expression(state, context),
        facets=list(context.facets),
        attributes_to_retrieve=list(context.attributes_to_retrieve),
        attributes_to_highlight=list(context.attributes_to_highlight),
        highlight_pre_tag=context.highlight_pre_tag,
        highlight_post_tag=context.highlight_post_tag,
        attributes_to_crop=list(context.attributes_to_crop),
        crop_length=context.crop_length,
    )


def build_discovery_request(field: str, index: str = SEARCH_INDEX) -> QueryRequest:
    """Zero-hit request asking for one field's full value distribution."""
    return QueryRequest(index=index, query="", limit=0, facets=[field])
