from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from facetsearch.filters import get_dimension
from ui.backend.schemas import Facets
from ui.backend.utils.app_limits import get_rate_limits, limiter
from ui.backend.utils.app_state import get_catalog, logger
from ui.backend.utils.facet_helpers import build_facets_from_catalog, get_filter_fields

_RATE_LIMIT_SEARCH, RATE_LIMIT_DEFAULT, RATE_LIMIT_FACETS = get_rate_limits()
router = APIRouter()


@router.get("/facets", response_model=Facets)
@limiter.limit(RATE_LIMIT_DEFAULT)
async def get_facets(request: Request):
    """
    Get facet values and counts for all filterable fields.
    Used to populate filter UI. Values are independent of any selection and
    only change after ``POST /facets/refresh``.
    """
    catalog = get_catalog(request)
    if not catalog.loaded:
        await catalog.load()
    return Facets(
        facets=build_facets_from_catalog(catalog),
        filter_fields=get_filter_fields(),
        error=catalog.error,
    )


@router.post("/facets/refresh", response_model=Facets)
@limiter.limit(RATE_LIMIT_FACETS)
async def refresh_facets(request: Request):
    catalog = get_catalog(request)
    await catalog.refresh()
    logger.info("Facet catalog refreshed")
    return Facets(
        facets=build_facets_from_catalog(catalog),
        filter_fields=get_filter_fields(),
        error=catalog.error,
    )


@router.get("/facets/{dimension}/options")
@limiter.limit(RATE_LIMIT_DEFAULT)
async def get_facet_options(
    request: Request,
    dimension: str,
    q: Optional[str] = Query(None, description="Substring to match values against"),
):
    """Values of one dimension matching ``q``, with their counts."""
    try:
        get_dimension(dimension)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    catalog = get_catalog(request)
    if not catalog.loaded:
        await catalog.load()
    counts = catalog.counts(dimension)
    return {
        "dimension": dimension,
        "options": [
            {"value": value, "count": counts.get(value, 0)}
            for value in catalog.options(dimension, q or "")
        ],
    }
