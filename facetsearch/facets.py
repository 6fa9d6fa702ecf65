"""Facet value discovery, independent of the current filter selection."""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from facetsearch.config import SEARCH_INDEX
from facetsearch.errors import (
    EmptyCatalogError,
    SearchError,
    SearchErrorState,
    error_state,
)
from facetsearch.filters import FILTER_DIMENSIONS, get_dimension
from facetsearch.query_builder import build_discovery_request

logger = logging.getLogger(__name__)

NOISE_VALUES = {"null", "undefined"}


class FacetValue(BaseModel):
    value: str
    count: int


def is_noise(value: Any) -> bool:
    if value is None:
        return True
    text = str(value)
    return text.strip() == "" or text.lower() in NOISE_VALUES


def build_facet_values(raw_counts: Dict[Any, int]) -> List[FacetValue]:
    """Drop noise values and sort by count desc, then value case-insensitively."""
    items = [
        (str(value), int(count or 0))
        for value, count in raw_counts.items()
        if not is_noise(value)
    ]
    items.sort(key=lambda item: (-item[1], item[0].lower()))
    return [FacetValue(value=value, count=count) for value, count in items]


class FacetCatalog:
    """
    Distinct values and counts for every configured filter field.

    Entries are loaded once at mount and only reloaded by ``refresh()``;
    changing filters never invalidates them.
    """

    def __init__(
        self,
        client,
        fields: Optional[Iterable[str]] = None,
        index: str = SEARCH_INDEX,
        scope: str = "global",
    ):
        self._client = client
        self.fields = list(fields or [d.field for d in FILTER_DIMENSIONS])
        self.index = index
        self.scope = scope
        self.entries: Dict[str, List[FacetValue]] = {f: [] for f in self.fields}
        self.is_loading = False
        self.loaded = False
        self.error: Optional[SearchErrorState] = None
        self.generation = 0

    async def discover_field(self, field: str) -> List[FacetValue]:
        request = build_discovery_request(field, self.index)
        payload = await self._client.search(
            request.index, request.query, request.to_search_options()
        )
        distribution = (payload.get("facetDistribution") or {}).get(field)
        if not distribution:
            logger.info("No facet distribution found for field: %s", field)
            return []
        values = build_facet_values(distribution)
        logger.info("Found %d distinct values for %s", len(values), field)
        return values

    async def _discover_or_empty(self, field: str) -> List[FacetValue]:
        try:
            return await self.discover_field(field)
        except Exception as e:
            logger.warning(
                "Failed to fetch values for %s, using empty list: %s", field, e
            )
            return []

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    async def load(self) -> Dict[str, List[FacetValue]]:
        """
        Discover every field in parallel; one failure leaves only its entry empty.

        Each call takes a new generation; a load that finishes after a newer
        one started leaves the catalog untouched.
        """
        self.generation += 1
        generation = self.generation
        self.is_loading = True
        self.error = None
        try:
            try:
                await self._client.get_stats(self.index)
            except SearchError as e:
                if not self.is_current(generation):
                    logger.debug("Dropping failure of superseded facet load: %s", e)
                    return self.entries
                logger.error("Failed to fetch filter options: %s", e)
                self.entries = {f: [] for f in self.fields}
                self.error = error_state(e, self.scope)
                return self.entries

            results = await asyncio.gather(
                *(self._discover_or_empty(f) for f in self.fields)
            )
            if not self.is_current(generation):
                logger.debug("Dropping superseded facet load %d", generation)
                return self.entries
            self.entries = dict(zip(self.fields, results))
            total = sum(len(v) for v in self.entries.values())
            logger.info(
                "Loaded %d filter options across %d fields", total, len(self.fields)
            )
            if total == 0:
                self.error = error_state(
                    EmptyCatalogError("facet discovery returned no values"),
                    self.scope,
                )
        finally:
            if self.is_current(generation):
                self.is_loading = False
                self.loaded = True
        return self.entries

    async def refresh(self) -> Dict[str, List[FacetValue]]:
        logger.info("Refreshing filter options...")
        return await self.load()

    def values(self, dimension: str) -> List[str]:
        return [fv.value for fv in self.entries.get(get_dimension(dimension).field, [])]

    def counts(self, dimension: str) -> Dict[str, int]:
        field = get_dimension(dimension).field
        return {fv.value: fv.count for fv in self.entries.get(field, [])}

    def options(self, dimension: str, search_text: str = "") -> List[str]:
        """Values of one dimension containing ``search_text`` (case-insensitive)."""
        values = self.values(dimension)
        needle = search_text.strip().lower()
        if not needle:
            return values
        return [v for v in values if needle in v.lower()]
