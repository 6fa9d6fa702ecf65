import asyncio

import pytest

from facetsearch.errors import (
    CONNECTIVITY_MESSAGE,
    EMPTY_CATALOG_MESSAGE,
    ConnectivityError,
    QueryError,
)
from facetsearch.facets import FacetCatalog, build_facet_values, is_noise

DISTRIBUTIONS = {
    "Industry": {"Technology": 12, "Energy": 4, "agriculture": 4, "null": 30},
    "Region": {"EMEA": 7, "APAC": 9, "": 2},
}


def _discovery_handler(index, query, options):
    field = options["facets"][0]
    return {
        "hits": [],
        "estimatedTotalHits": 0,
        "facetDistribution": {field: DISTRIBUTIONS.get(field, {})},
    }


@pytest.mark.parametrize("value", [None, "", "   ", "null", "NULL", "undefined"])
def test_noise_values(value):
    assert is_noise(value)


def test_real_values_are_not_noise():
    assert not is_noise("Nullabor Mining")
    assert not is_noise(0)


def test_values_sorted_by_count_then_case_insensitive_name():
    values = build_facet_values({"b": 2, "A": 2, "c": 5, "undefined": 9})

    assert [(v.value, v.count) for v in values] == [("c", 5), ("A", 2), ("b", 2)]


@pytest.mark.asyncio
async def test_load_discovers_every_field(engine_factory):
    engine = engine_factory(_discovery_handler)
    catalog = FacetCatalog(engine, fields=["Industry", "Region"])

    entries = await catalog.load()

    assert [v.value for v in entries["Industry"]] == [
        "Technology",
        "agriculture",
        "Energy",
    ]
    assert [v.value for v in entries["Region"]] == ["APAC", "EMEA"]
    assert catalog.loaded
    assert not catalog.is_loading
    assert catalog.error is None
    assert engine.stats_calls == 1
    for call in engine.calls:
        assert call["query"] == ""
        assert call["options"]["limit"] == 0
        assert "filter" not in call["options"]


@pytest.mark.asyncio
async def test_one_failing_field_leaves_only_its_entry_empty(engine_factory):
    def handler(index, query, options):
        if options["facets"] == ["Region"]:
            raise QueryError("Attribute `Region` is not filterable.", "invalid_facet")
        return _discovery_handler(index, query, options)

    catalog = FacetCatalog(engine_factory(handler), fields=["Industry", "Region"])
    await catalog.load()

    assert catalog.entries["Region"] == []
    assert len(catalog.entries["Industry"]) == 3
    assert catalog.error is None


@pytest.mark.asyncio
async def test_empty_discovery_is_a_warning(fake_engine):
    catalog = FacetCatalog(fake_engine, scope="content-management")

    await catalog.load()

    assert all(values == [] for values in catalog.entries.values())
    assert len(catalog.entries) == 12
    assert catalog.error.severity == "warning"
    assert catalog.error.message == EMPTY_CATALOG_MESSAGE
    assert catalog.error.scope == "content-management"


@pytest.mark.asyncio
async def test_unreachable_engine_skips_discovery(fake_engine):
    fake_engine.stats_error = ConnectivityError("refused")
    catalog = FacetCatalog(fake_engine)

    await catalog.load()

    assert fake_engine.calls == []
    assert catalog.error.kind == "connectivity"
    assert catalog.error.message == CONNECTIVITY_MESSAGE
    assert catalog.loaded
    assert not catalog.is_loading


@pytest.mark.asyncio
async def test_lookups_by_dimension_key_or_field(engine_factory):
    catalog = FacetCatalog(engine_factory(_discovery_handler))
    await catalog.load()

    assert catalog.values("regions") == ["APAC", "EMEA"]
    assert catalog.counts("Industry")["Technology"] == 12
    assert catalog.options("industries", "ENER") == ["Energy"]
    assert catalog.options("industries", "  ") == catalog.values("industries")
    assert catalog.values("cities") == []


@pytest.mark.asyncio
async def test_refresh_runs_discovery_again(engine_factory):
    engine = engine_factory(_discovery_handler)
    catalog = FacetCatalog(engine, fields=["Industry"])
    await catalog.load()

    DISTRIBUTIONS["Industry"]["Mining"] = 50
    try:
        await catalog.refresh()
    finally:
        del DISTRIBUTIONS["Industry"]["Mining"]

    assert len(engine.calls) == 2
    assert catalog.values("Industry")[0] == "Mining"


@pytest.mark.asyncio
async def test_slow_load_does_not_overwrite_newer_refresh(engine_factory):
    gate = asyncio.Event()
    calls = []

    async def handler(index, query, options):
        calls.append(options["facets"][0])
        if len(calls) == 1:
            await gate.wait()
            return {"facetDistribution": {"Industry": {"OLD": 1}}}
        return {"facetDistribution": {"Industry": {"NEW": 1}}}

    catalog = FacetCatalog(engine_factory(handler), fields=["Industry"])

    slow = asyncio.create_task(catalog.load())
    await asyncio.sleep(0)
    await catalog.refresh()
    assert catalog.values("Industry") == ["NEW"]

    gate.set()
    await slow

    assert catalog.values("Industry") == ["NEW"]
    assert not catalog.is_loading
    assert catalog.error is None
