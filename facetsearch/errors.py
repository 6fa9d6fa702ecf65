"""Error taxonomy for the search orchestration layer."""

from typing import Optional

from pydantic import BaseModel

INDEX_NOT_FOUND_MESSAGE = "Search index not found. Please ensure documents are indexed."
CONNECTIVITY_MESSAGE = (
    "Cannot connect to search service. Please check if the search engine is running."
)
GENERIC_MESSAGE = "Search failed. Please try again."
EMPTY_CATALOG_MESSAGE = (
    "No filter options found. Check if your search index has filterable "
    "attributes configured."
)


class SearchError(Exception):
    """Base class for failures raised at the search engine boundary."""

    kind = "search"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConnectivityError(SearchError):
    """Engine unreachable, timed out, or failing server-side."""

    kind = "connectivity"


class QueryError(SearchError):
    """Engine rejected the request (bad filter expression, unknown facet...)."""

    kind = "query"


class EmptyCatalogError(SearchError):
    """Facet discovery returned no populated field."""

    kind = "empty_catalog"


class StaleResponseDiscard(Exception):
    """A response arrived after its request was superseded."""

    def __init__(self, generation: int, current: int):
        super().__init__(f"discarded generation {generation} (current {current})")
        self.generation = generation
        self.current = current


class SearchErrorState(BaseModel):
    """User-visible, dismissable error scoped to one search context."""

    kind: str
    message: str
    scope: str
    severity: str = "error"
    dismissable: bool = True


def user_message(exc: SearchError) -> str:
    if exc.code == "index_not_found":
        return INDEX_NOT_FOUND_MESSAGE
    if isinstance(exc, ConnectivityError):
        return CONNECTIVITY_MESSAGE
    if isinstance(exc, EmptyCatalogError):
        return EMPTY_CATALOG_MESSAGE
    return GENERIC_MESSAGE


def error_state(exc: SearchError, scope: str) -> SearchErrorState:
    severity = "warning" if isinstance(exc, EmptyCatalogError) else "error"
    return SearchErrorState(
        kind=exc.kind, message=user_message(exc), scope=scope, severity=severity
    )
