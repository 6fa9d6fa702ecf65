import logging

from fastapi import Request

from facetsearch.contexts import SearchContextRegistry
from facetsearch.engine import SearchEngineClient
from facetsearch.facets import FacetCatalog
from facetsearch.log_config import setup_logging


def get_engine_client(request: Request) -> SearchEngineClient:
    """Engine client created at startup and stored on the app state."""
    return request.app.state.engine_client


def get_catalog(request: Request) -> FacetCatalog:
    return request.app.state.facet_catalog


def get_registry(request: Request) -> SearchContextRegistry:
    return request.app.state.context_registry


logger: logging.Logger = setup_logging("api")
