"""Structured filter selection shared by the query builder, URL sync and pills."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from facetsearch.config import VALUE_RANGE_MAX, VALUE_RANGE_MIN

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]
Number = Union[int, float]


@dataclass(frozen=True)
class FilterDimension:
    key: str
    field: str
    label: str


# Declared order drives query clause order and pill order.
FILTER_DIMENSIONS: Tuple[FilterDimension, ...] = (
    FilterDimension("client_types", "Client_Type", "Client Type"),
    FilterDimension("document_types", "Document_Type", "Document Type"),
    FilterDimension("document_sub_types", "Document_Sub_Type", "Document Sub-Type"),
    FilterDimension("industries", "Industry", "Industry"),
    FilterDimension("sub_industries", "Sub_Industry", "Sub-Industry"),
    FilterDimension("services", "Service", "Service"),
    FilterDimension("sub_services", "Sub_Service", "Sub-Service"),
    FilterDimension("business_units", "Business_Unit", "Business Unit"),
    FilterDimension("regions", "Region", "Region"),
    FilterDimension("countries", "Country", "Country"),
    FilterDimension("states", "State", "State"),
    FilterDimension("cities", "City", "City"),
)

DIMENSIONS_BY_KEY: Dict[str, FilterDimension] = {d.key: d for d in FILTER_DIMENSIONS}
DIMENSIONS_BY_FIELD: Dict[str, FilterDimension] = {
    d.field: d for d in FILTER_DIMENSIONS
}

DEFAULT_VALUE_RANGE: Tuple[Number, Number] = (VALUE_RANGE_MIN, VALUE_RANGE_MAX)


def get_dimension(key_or_field: str) -> FilterDimension:
    """Look up a dimension by state key (``industries``) or field (``Industry``)."""
    dimension = DIMENSIONS_BY_KEY.get(key_or_field) or DIMENSIONS_BY_FIELD.get(
        key_or_field
    )
    if dimension is None:
        raise ValueError(f"Unknown filter dimension: {key_or_field}")
    return dimension


def coerce_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def normalize_date_range(
    start: DateLike, end: DateLike
) -> Tuple[Optional[date], Optional[date]]:
    """Coerce both bounds to dates, swapping a reversed pair."""
    start_date = coerce_date(start)
    end_date = coerce_date(end)
    if start_date and end_date and start_date > end_date:
        logger.debug("Swapping reversed date range %s > %s", start_date, end_date)
        start_date, end_date = end_date, start_date
    return start_date, end_date


def normalize_value_range(low: Number, high: Number) -> Tuple[Number, Number]:
    """Clamp both bounds into the allowed span and order them."""
    low = min(max(low, VALUE_RANGE_MIN), VALUE_RANGE_MAX)
    high = min(max(high, VALUE_RANGE_MIN), VALUE_RANGE_MAX)
    if low > high:
        low, high = high, low
    return low, high


def _empty_selections() -> Dict[str, List[str]]:
    return {d.key: [] for d in FILTER_DIMENSIONS}


@dataclass
class FilterState:
    """
    Mutable filter selection for one page mount.

    Each dimension keeps its selected values in insertion order without
    duplicates. Range setters correct invalid input instead of raising.
    """

    selections: Dict[str, List[str]] = field(default_factory=_empty_selections)
    date_range: Tuple[Optional[date], Optional[date]] = (None, None)
    value_range: Tuple[Number, Number] = DEFAULT_VALUE_RANGE
    search_term: str = ""

    def __post_init__(self):
        merged = _empty_selections()
        for key, values in self.selections.items():
            merged[get_dimension(key).key] = _dedupe(values)
        self.selections = merged
        self.date_range = normalize_date_range(*self.date_range)
        self.value_range = normalize_value_range(*self.value_range)

    def selected(self, dimension: str) -> List[str]:
        return list(self.selections[get_dimension(dimension).key])

    def toggle(self, dimension: str, value: str) -> bool:
        """Add or remove ``value``; returns True when it is now selected."""
        key = get_dimension(dimension).key
        if value in self.selections[key]:
            self.selections[key] = [v for v in self.selections[key] if v != value]
            return False
        self.selections[key] = self.selections[key] + [value]
        return True

    def remove_value(self, dimension: str, value: str) -> None:
        key = get_dimension(dimension).key
        self.selections[key] = [v for v in self.selections[key] if v != value]

    def set_dimension(self, dimension: str, values: Iterable[str]) -> None:
        self.selections[get_dimension(dimension).key] = _dedupe(values)

    def clear_dimension(self, dimension: str) -> None:
        self.selections[get_dimension(dimension).key] = []

    def set_date_range(self, start: DateLike, end: DateLike) -> None:
        self.date_range = normalize_date_range(start, end)

    def clear_date_range(self) -> None:
        self.date_range = (None, None)

    def has_complete_date_range(self) -> bool:
        return self.date_range[0] is not None and self.date_range[1] is not None

    def set_value_range(self, low: Number, high: Number) -> None:
        self.value_range = normalize_value_range(low, high)

    def reset_value_range(self) -> None:
        self.value_range = DEFAULT_VALUE_RANGE

    def is_default_value_range(self) -> bool:
        return tuple(self.value_range) == DEFAULT_VALUE_RANGE

    def set_search_term(self, term: Optional[str]) -> None:
        self.search_term = term or ""

    def active_dimensions(self) -> List[FilterDimension]:
        return [d for d in FILTER_DIMENSIONS if self.selections[d.key]]

    def clear(self) -> None:
        """Reset every slice to its default."""
        self.selections = _empty_selections()
        self.date_range = (None, None)
        self.value_range = DEFAULT_VALUE_RANGE
        self.search_term = ""

    def copy(self) -> "FilterState":
        return FilterState(
            selections={k: list(v) for k, v in self.selections.items()},
            date_range=self.date_range,
            value_range=self.value_range,
            search_term=self.search_term,
        )


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
