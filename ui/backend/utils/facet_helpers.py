"""Helpers for building facet responses from the facet catalog."""

from typing import Dict, List

from facetsearch.facets import FacetCatalog, FacetValue, build_facet_values
from facetsearch.filters import DIMENSIONS_BY_FIELD, FILTER_DIMENSIONS


def get_filter_fields() -> Dict[str, str]:
    """Dimension key -> display label, in declared order."""
    return {d.key: d.label for d in FILTER_DIMENSIONS}


def build_facets_from_catalog(catalog: FacetCatalog) -> Dict[str, List[FacetValue]]:
    """Catalog entries keyed by dimension key rather than engine field."""
    facets_result: Dict[str, List[FacetValue]] = {}
    for field, values in catalog.entries.items():
        dimension = DIMENSIONS_BY_FIELD.get(field)
        key = dimension.key if dimension else field
        facets_result[key] = values
    return facets_result


def build_facets_from_distribution(
    distribution: Dict[str, Dict[str, int]],
) -> Dict[str, Dict[str, int]]:
    """Clean a result's facet snapshot with the same noise and ordering rules."""
    return {
        field: {fv.value: fv.count for fv in build_facet_values(counts or {})}
        for field, counts in distribution.items()
    }
