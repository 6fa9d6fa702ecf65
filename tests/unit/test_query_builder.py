from datetime import date

from facetsearch.contexts import (
    GLOBAL_CONTEXT,
    SEARCH_CONTEXTS,
    SearchContextRegistry,
    build_contexts,
)
from facetsearch.filters import FilterState
from facetsearch.query_builder import (
    build_date_clause,
    build_discovery_request,
    build_filter_expression,
    build_or_group,
    build_query_request,
    quote_value,
)

LIBRARY = SEARCH_CONTEXTS["/content-management"]
DASHBOARD = SEARCH_CONTEXTS["/"]


def test_empty_state_has_no_filter():
    request = build_query_request(FilterState(), LIBRARY)

    assert request.filter is None
    assert request.query == ""
    assert request.offset == 0
    assert request.limit == 24
    assert request.sort == ["publishedAt:desc"]
    assert "filter" not in request.to_search_options()


def test_single_dimension_is_or_group():
    state = FilterState()
    state.set_dimension("industries", ["Tech", "Finance"])

    assert (
        build_filter_expression(state, LIBRARY)
        == '(Industry = "Tech" OR Industry = "Finance")'
    )


def test_dimensions_follow_declared_order_not_selection_order():
    state = FilterState()
    state.toggle("regions", "EMEA")
    state.toggle("document_types", "Proposal")

    assert build_filter_expression(state) == (
        '(Document_Type = "Proposal") AND (Region = "EMEA")'
    )


def test_clause_order_context_date_value_dimensions():
    state = FilterState()
    state.toggle("industries", "Energy")
    state.set_value_range(1000, 50000)
    state.set_date_range("2024-01-01", "2024-03-31")

    assert build_filter_expression(state, DASHBOARD) == (
        'publishedAt >= "2024-01-01" AND '
        'Last_Stage_Change_Date >= "2024-01-01" AND '
        'Last_Stage_Change_Date <= "2024-03-31" AND '
        "value >= 1000 AND value <= 50000 AND "
        '(Industry = "Energy")'
    )


def test_half_set_date_range_is_not_compiled():
    state = FilterState()
    state.set_date_range(date(2024, 1, 1), None)

    assert build_filter_expression(state) is None
    assert build_date_clause(None, date(2024, 1, 1)) is None


def test_reversed_date_range_is_swapped():
    clause = build_date_clause(date(2024, 3, 31), date(2024, 1, 1))

    assert clause == (
        'Last_Stage_Change_Date >= "2024-01-01" AND '
        'Last_Stage_Change_Date <= "2024-03-31"'
    )


def test_default_value_range_is_elided():
    state = FilterState()
    state.set_value_range(0, 1_000_000)

    assert build_filter_expression(state) is None


def test_values_are_quoted_and_escaped():
    assert quote_value('Acme "North"') == '"Acme \\"North\\""'
    assert quote_value("C:\\docs") == '"C:\\\\docs"'
    assert build_or_group("City", ["St. John's"]) == '(City = "St. John\'s")'


def test_paging_and_sort_resolution():
    request = build_query_request(
        FilterState(), LIBRARY, page=3, sort="proposalName:asc"
    )

    assert request.page == 3
    assert request.offset == 48
    assert request.sort == ["proposalName:asc"]

    dashboard = build_query_request(FilterState(), DASHBOARD, sort="value:desc")
    assert dashboard.sort == ["publishedAt:desc"]


def test_search_term_override():
    state = FilterState(search_term="committed")

    assert build_query_request(state, LIBRARY).query == "committed"
    assert build_query_request(state, LIBRARY, search_term="typed").query == "typed"


def test_library_options_include_crop_settings():
    options = build_query_request(FilterState(), LIBRARY).to_search_options()

    assert options["attributesToCrop"] == ["Description"]
    assert options["cropLength"] == 30
    assert options["highlightPostTag"] == "</mark>"
    assert "Client_Name" in options["attributesToHighlight"]


def test_dashboard_options_have_no_crop_settings():
    options = build_query_request(FilterState(), DASHBOARD).to_search_options()

    assert "attributesToCrop" not in options
    assert options["facets"] == ["Document_Type", "Industry", "Region"]
    assert options["limit"] == 6


def test_global_mode_drops_context_defaults():
    registry = SearchContextRegistry(contexts=build_contexts(), path="/")
    registry.promote_to_global()
    state = FilterState()

    assert build_query_request(state, registry.active).filter is None


def test_unknown_route_uses_global_fallback():
    registry = SearchContextRegistry(contexts=build_contexts(), path="/reports")
    request = build_query_request(FilterState(), registry.active)

    assert registry.active is GLOBAL_CONTEXT
    assert request.scope == "global"
    assert request.limit == 10


def test_discovery_request_asks_for_one_field_and_no_hits():
    request = build_discovery_request("Industry")

    assert request.to_search_options() == {
        "offset": 0,
        "limit": 0,
        "facets": ["Industry"],
    }
    assert request.query == ""


def test_default_value_range_with_one_dimension():
    state = FilterState(
        selections={"industries": ["Energy"]}, value_range=(0, 1_000_000)
    )

    assert build_filter_expression(state, LIBRARY) == '(Industry = "Energy")'


def test_free_text_in_library_has_no_filter():
    request = build_query_request(FilterState(search_term="carbon"), LIBRARY)

    assert request.query == "carbon"
    assert request.filter is None
    assert request.sort == ["publishedAt:desc"]


def test_reversed_state_dates_compile_in_order():
    state = FilterState(date_range=("2024-01-01", "2023-01-01"))

    assert build_filter_expression(state) == (
        'Last_Stage_Change_Date >= "2023-01-01" AND '
        'Last_Stage_Change_Date <= "2024-01-01"'
    )


def test_two_dimensions_with_two_values_each():
    state = FilterState(
        selections={"regions": ["b1", "b2"], "industries": ["a1", "a2"]}
    )

    assert build_filter_expression(state) == (
        '(Industry = "a1" OR Industry = "a2") AND (Region = "b1" OR Region = "b2")'
    )
