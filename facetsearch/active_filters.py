"""Removable "active filter" pills derived from a FilterState."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from facetsearch.filters import FILTER_DIMENSIONS, FilterState

SEARCH_TERM = "search_term"
DATE_RANGE = "date_range"
VALUE_RANGE = "value_range"
DIMENSION = "dimension"


@dataclass
class ActiveFilterDescriptor:
    kind: str
    label: str
    display_value: str
    remove: Callable[[], None]
    dimension: Optional[str] = None
    value: Optional[str] = None
    # FilterState that ``remove`` edits.
    state: Optional[FilterState] = field(default=None, repr=False, compare=False)

    @property
    def title(self) -> str:
        return f"Clear filter: {self.label}: {self.display_value}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "label": self.label,
            "display_value": self.display_value,
            "dimension": self.dimension,
            "value": self.value,
        }


def format_currency(value: float) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1000:
        return f"{value / 1000:.0f}K"
    return f"{value:,.0f}"


def derive_active_filters(state: FilterState) -> List[ActiveFilterDescriptor]:
    """
    Pills in display order: search term, date range, value range, then each
    dimension's values in declared dimension order.

    Each ``remove`` touches exactly one slice of ``state``.
    """
    pills: List[ActiveFilterDescriptor] = []

    if state.search_term:
        pills.append(
            ActiveFilterDescriptor(
                kind=SEARCH_TERM,
                label="Search",
                display_value=state.search_term,
                remove=lambda: state.set_search_term(""),
                state=state,
            )
        )

    if state.has_complete_date_range():
        start, end = state.date_range
        pills.append(
            ActiveFilterDescriptor(
                kind=DATE_RANGE,
                label="Date",
                display_value=f"{start.isoformat()} - {end.isoformat()}",
                remove=state.clear_date_range,
                state=state,
            )
        )

    if not state.is_default_value_range():
        low, high = state.value_range
        pills.append(
            ActiveFilterDescriptor(
                kind=VALUE_RANGE,
                label="Value",
                display_value=f"{format_currency(low)} - {format_currency(high)}",
                remove=state.reset_value_range,
                state=state,
            )
        )

    for dimension in FILTER_DIMENSIONS:
        for value in state.selections[dimension.key]:
            pills.append(
                ActiveFilterDescriptor(
                    kind=DIMENSION,
                    label=dimension.label,
                    display_value=value,
                    remove=_remover(state, dimension.key, value),
                    dimension=dimension.key,
                    value=value,
                    state=state,
                )
            )
    return pills


def _remover(state: FilterState, dimension: str, value: str) -> Callable[[], None]:
    def remove() -> None:
        state.remove_value(dimension, value)

    return remove


def active_filter_count(state: FilterState) -> int:
    return len(derive_active_filters(state))
