from datetime import date, datetime

import pytest

from facetsearch.filters import (
    DEFAULT_VALUE_RANGE,
    FILTER_DIMENSIONS,
    FilterState,
    coerce_date,
    get_dimension,
)


def test_twelve_dimensions_in_declared_order():
    assert [d.field for d in FILTER_DIMENSIONS] == [
        "Client_Type",
        "Document_Type",
        "Document_Sub_Type",
        "Industry",
        "Sub_Industry",
        "Service",
        "Sub_Service",
        "Business_Unit",
        "Region",
        "Country",
        "State",
        "City",
    ]


def test_get_dimension_by_key_or_field():
    assert get_dimension("sub_industries").field == "Sub_Industry"
    assert get_dimension("Sub_Industry").key == "sub_industries"
    with pytest.raises(ValueError):
        get_dimension("colour")


def test_toggle_adds_then_removes():
    state = FilterState()

    assert state.toggle("industries", "Tech") is True
    assert state.toggle("industries", "Energy") is True
    assert state.selected("industries") == ["Tech", "Energy"]

    assert state.toggle("Industry", "Tech") is False
    assert state.selected("industries") == ["Energy"]


def test_set_dimension_keeps_first_occurrence_order():
    state = FilterState()
    state.set_dimension("regions", ["EMEA", "APAC", "EMEA", "LATAM"])

    assert state.selected("regions") == ["EMEA", "APAC", "LATAM"]


def test_constructor_accepts_field_names_and_dedupes():
    state = FilterState(selections={"Industry": ["A", "A", "B"]})

    assert state.selections["industries"] == ["A", "B"]
    assert state.selections["regions"] == []


def test_date_range_coercion_and_swap():
    state = FilterState()
    state.set_date_range("2024-05-01", datetime(2024, 2, 1, 12, 30))

    assert state.date_range == (date(2024, 2, 1), date(2024, 5, 1))
    assert state.has_complete_date_range()

    state.set_date_range(None, "2024-01-01")
    assert not state.has_complete_date_range()
    assert coerce_date("") is None


def test_value_range_is_clamped_and_ordered():
    state = FilterState()

    state.set_value_range(-50, 2_000_000)
    assert state.value_range == DEFAULT_VALUE_RANGE
    assert state.is_default_value_range()

    state.set_value_range(5000, 100)
    assert state.value_range == (100, 5000)
    assert not state.is_default_value_range()

    state.reset_value_range()
    assert state.is_default_value_range()


def test_clear_resets_every_slice():
    state = FilterState(search_term="solar")
    state.toggle("cities", "Austin")
    state.set_date_range("2024-01-01", "2024-02-01")
    state.set_value_range(10, 20)

    state.clear()

    assert state.active_dimensions() == []
    assert state.date_range == (None, None)
    assert state.is_default_value_range()
    assert state.search_term == ""


def test_copy_is_independent():
    state = FilterState()
    state.toggle("countries", "Kenya")
    clone = state.copy()

    clone.toggle("countries", "Chile")

    assert state.selected("countries") == ["Kenya"]
    assert clone.selected("countries") == ["Kenya", "Chile"]
