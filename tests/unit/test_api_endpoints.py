import pytest
from starlette.testclient import TestClient

from facetsearch.contexts import SearchContextRegistry, build_contexts
from facetsearch.errors import CONNECTIVITY_MESSAGE, ConnectivityError
from facetsearch.facets import FacetCatalog
from ui.backend import main as main_module


def _api_handler(engine_factory):
    def handler(index, query, options):
        if options.get("limit") == 0:
            field = options["facets"][0]
            distribution = {
                "Industry": {"Technology": 5, "Energy": 9, "null": 3},
                "Region": {"EMEA": 2},
            }.get(field, {})
            return {"hits": [], "facetDistribution": {field: distribution}}
        return engine_factory.payload(
            [{"id": 1, "SF_Number": "SF-Word-1", "Client_Name": "Acme"}],
            total=1,
            facets={"Industry": {"Technology": 1, "undefined": 4}},
            query=query,
        )

    return handler


@pytest.fixture
def api(engine_factory, monkeypatch):
    engine = engine_factory(_api_handler(engine_factory))
    app = main_module.app
    monkeypatch.setattr(main_module, "API_KEY", None)
    monkeypatch.setattr(app.state, "engine_client", engine, raising=False)
    monkeypatch.setattr(app.state, "facet_catalog", FacetCatalog(engine), raising=False)
    monkeypatch.setattr(
        app.state,
        "context_registry",
        SearchContextRegistry(contexts=build_contexts()),
        raising=False,
    )
    client = TestClient(app)
    client.engine = engine
    return client


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root_lists_endpoints(api):
    result = api.get("/").json()

    assert result["name"] == "Document Faceted Search API"
    assert "/search" in result["endpoints"]
    assert "/facets/refresh" in result["endpoints"]


def test_contexts(api):
    contexts = {c["path"]: c for c in api.get("/contexts").json()}

    assert set(contexts) == {"/", "/content-management", "/bookmarks"}
    assert contexts["/content-management"]["page_size"] == 24
    assert contexts["/bookmarks"]["metadata"]["default_filters"] == [
        "Document_Type EXISTS"
    ]


def test_search_compiles_filters_for_context(api):
    body = {
        "path": "/content-management",
        "filters": {
            "selections": {"regions": ["EMEA"], "industries": ["Tech"]},
            "search_term": "grid",
        },
        "sort": "value:desc",
    }

    response = api.post("/search", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["scope"] == "content-management"
    assert data["filter"] == '(Industry = "Tech") AND (Region = "EMEA")'
    assert data["results"][0]["documentUrl"] == "/documents/test_word.docx"
    assert data["facet_distribution"] == {"Industry": {"Technology": 1}}
    assert data["error"] is None

    call = api.engine.calls[-1]
    assert call["query"] == "grid"
    assert call["options"]["sort"] == ["value:desc"]


def test_search_global_flag_drops_context_defaults(api):
    response = api.post("/search", json={"path": "/", "global_search": True})

    assert response.json()["filter"] is None
    assert "filter" not in api.engine.calls[-1]["options"]


def test_search_failure_is_reported_in_body(api, engine_factory):
    def handler(index, query, options):
        raise ConnectivityError("refused")

    main_module.app.state.engine_client = engine_factory(handler)

    response = api.post("/search", json={"path": "/bookmarks"})

    assert response.status_code == 200
    data = response.json()
    assert data["results"] == []
    assert data["total"] == 0
    assert data["error"]["message"] == CONNECTIVITY_MESSAGE
    assert data["error"]["scope"] == "bookmarks"


def test_search_unknown_dimension_is_bad_request(api):
    body = {"filters": {"selections": {"colours": ["red"]}}}

    response = api.post("/search", json=body)

    assert response.status_code == 400
    assert "colours" in response.json()["detail"]


def test_active_filters(api):
    body = {
        "selections": {"cities": ["Austin"], "document_types": ["Proposal"]},
        "value_min": 1000,
        "value_max": 5000,
        "search_term": "solar",
    }

    data = api.post("/active-filters", json=body).json()

    assert data["count"] == 4
    assert [f["kind"] for f in data["filters"]] == [
        "search_term",
        "value_range",
        "dimension",
        "dimension",
    ]
    assert [f["value"] for f in data["filters"][2:]] == ["Proposal", "Austin"]


def test_facets_keyed_by_dimension(api):
    data = api.get("/facets").json()

    assert [f["value"] for f in data["facets"]["industries"]] == [
        "Energy",
        "Technology",
    ]
    assert data["facets"]["cities"] == []
    assert data["filter_fields"]["sub_services"] == "Sub-Service"
    assert data["error"] is None


def test_facet_refresh_reloads_catalog(api):
    api.get("/facets")
    discovery_calls = len(api.engine.calls)

    response = api.post("/facets/refresh")

    assert response.status_code == 200
    assert len(api.engine.calls) == discovery_calls * 2


def test_facet_options(api):
    data = api.get("/facets/industries/options", params={"q": "tech"}).json()

    assert data["options"] == [{"value": "Technology", "count": 5}]
    assert api.get("/facets/colours/options").status_code == 404


def test_api_key_required_when_configured(api, monkeypatch):
    monkeypatch.setattr(main_module, "API_KEY", "secret")

    assert api.get("/contexts").status_code == 401
    assert api.get("/contexts", headers={"X-API-Key": "secret"}).status_code == 200
    assert api.get("/health").status_code == 200
