"""Per-page search contexts and the registry that resolves them from a route."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from facetsearch.config import get_context_overrides
from facetsearch.filters import FILTER_DIMENSIONS

logger = logging.getLogger(__name__)

HIGHLIGHT_PRE_TAG = '<mark class="bg-primary bg-opacity-20 rounded px-1">'
HIGHLIGHT_POST_TAG = "</mark>"

ALL_FACET_FIELDS = [d.field for d in FILTER_DIMENSIONS]

RETRIEVED_FIELDS = [
    "id",
    "documentId",
    "SF_Number",
    "Unique_Id",
    "unique_id",
    "Client_Name",
    "Document_Type",
    "Industry",
    "Region",
    "publishedAt",
    "updatedAt",
]
HIGHLIGHTED_FIELDS = [
    "Unique_Id",
    "unique_id",
    "SF_Number",
    "Client_Name",
    "Document_Type",
]

LIBRARY_SORT_OPTIONS = [
    "publishedAt:desc",
    "publishedAt:asc",
    "proposalName:asc",
    "proposalName:desc",
    "value:desc",
]

GLOBAL_PLACEHOLDER = "Search all documents..."
GLOBAL_SUGGESTIONS = ["Search everything", "All documents", "Global search"]

_SUGGESTIONS = [
    "Environmental Impact Assessment",
    "Sustainability Report",
    "Carbon Footprint Analysis",
    "ESG Compliance Document",
    "Renewable Energy Proposal",
]


class SearchContextConfig(BaseModel):
    scope: str
    title: str = ""
    description: str = ""
    placeholder: str = GLOBAL_PLACEHOLDER
    suggestions: List[str] = []
    default_filters: List[str] = []
    facets: List[str] = []
    sort_options: List[str] = ["publishedAt:desc"]
    default_sort: str = "publishedAt:desc"
    page_size: int = 10
    attributes_to_retrieve: List[str] = RETRIEVED_FIELDS
    attributes_to_highlight: List[str] = HIGHLIGHTED_FIELDS
    highlight_pre_tag: str = HIGHLIGHT_PRE_TAG
    highlight_post_tag: str = HIGHLIGHT_POST_TAG
    attributes_to_crop: List[str] = []
    crop_length: Optional[int] = None

    def resolve_sort(self, sort: Optional[str]) -> str:
        if sort and sort in self.sort_options:
            return sort
        if sort:
            logger.debug("Sort %s not allowed in %s; using default", sort, self.scope)
        return self.default_sort


GLOBAL_CONTEXT = SearchContextConfig(
    scope="global",
    title="Global Search",
    description="Search across all content",
    suggestions=["Search everything"],
    page_size=10,
)

SEARCH_CONTEXTS: Dict[str, SearchContextConfig] = {
    "/": SearchContextConfig(
        scope="dashboard",
        title="Dashboard Search",
        description="Search recent and trending documents",
        placeholder="Search recent documents, trends...",
        suggestions=_SUGGESTIONS,
        default_filters=['publishedAt >= "2024-01-01"'],
        facets=["Document_Type", "Industry", "Region"],
        page_size=6,
    ),
    "/content-management": SearchContextConfig(
        scope="content-management",
        title="Content Library",
        description="Search all documents and reports",
        placeholder="Search all documents, reports, proposals...",
        suggestions=_SUGGESTIONS,
        facets=ALL_FACET_FIELDS,
        sort_options=LIBRARY_SORT_OPTIONS,
        page_size=24,
        attributes_to_crop=["Description"],
        crop_length=30,
    ),
    "/bookmarks": SearchContextConfig(
        scope="bookmarks",
        title="Bookmarked Documents",
        description="Search your saved documents",
        placeholder="Search your bookmarked documents...",
        suggestions=_SUGGESTIONS,
        default_filters=["Document_Type EXISTS"],
        facets=["Document_Type", "Industry"],
        sort_options=["bookmarked_at:desc", "publishedAt:desc"],
        default_sort="bookmarked_at:desc",
        page_size=8,
    ),
}


def build_contexts(
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Dict[str, SearchContextConfig]:
    """Apply ``search_contexts`` overrides from config.json on top of defaults."""
    contexts = dict(SEARCH_CONTEXTS)
    for path, override in (overrides or {}).items():
        base = contexts.get(path)
        if base is None:
            contexts[path] = SearchContextConfig(**override)
        else:
            contexts[path] = SearchContextConfig.model_validate(
                {**base.model_dump(), **override}
            )
        logger.info("Loaded search context override for %s", path)
    return contexts


class SearchContextRegistry:
    """
    Resolves the active route to a SearchContextConfig.

    ``generation`` increases on every switch so callers can tell whether work
    started under an older context. ``promote_to_global`` drops the context's
    default clauses until the next switch.
    """

    def __init__(
        self,
        contexts: Optional[Dict[str, SearchContextConfig]] = None,
        fallback: SearchContextConfig = GLOBAL_CONTEXT,
        path: str = "/",
    ):
        if contexts is None:
            contexts = build_contexts(get_context_overrides())
        self._contexts = contexts
        self._fallback = fallback
        self._path = path
        self._active = self.resolve(path)
        self._global_mode = False
        self.generation = 0

    def resolve(self, path: str) -> SearchContextConfig:
        return self._contexts.get(path, self._fallback)

    @property
    def path(self) -> str:
        return self._path

    @property
    def global_mode(self) -> bool:
        return self._global_mode

    @property
    def active(self) -> SearchContextConfig:
        """Active config, with default clauses removed in global mode."""
        if self._global_mode:
            return self._active.model_copy(update={"default_filters": []})
        return self._active

    def switch(self, path: str) -> SearchContextConfig:
        self._path = path
        self._active = self.resolve(path)
        self._global_mode = False
        self.generation += 1
        logger.info("Search context switched to %s (%s)", self._active.scope, path)
        return self._active

    def promote_to_global(self) -> None:
        if self._global_mode:
            return
        logger.info("Switching %s to global search mode", self._active.scope)
        self._global_mode = True
        self.generation += 1

    def placeholder(self) -> str:
        return GLOBAL_PLACEHOLDER if self._global_mode else self._active.placeholder

    def suggestions(self) -> List[str]:
        return GLOBAL_SUGGESTIONS if self._global_mode else self._active.suggestions

    def contexts(self) -> Dict[str, SearchContextConfig]:
        return dict(self._contexts)
