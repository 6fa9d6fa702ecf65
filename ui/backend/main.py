"""
Search API Backend
FastAPI server that provides contextual faceted search over the document index.
"""

import os
import secrets
import signal

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from facetsearch.config import MEILISEARCH_HOST, SEARCH_INDEX
from facetsearch.contexts import SearchContextRegistry
from facetsearch.engine import SearchEngineClient
from facetsearch.facets import FacetCatalog
from ui.backend.routes import config as config_routes
from ui.backend.routes import facets as facets_routes
from ui.backend.routes import search as search_routes
from ui.backend.utils.app_limits import get_rate_limits, limiter
from ui.backend.utils.app_state import logger


def _log_signal(signum, _frame) -> None:
    logger.warning("Received signal %s", signum)


signal.signal(signal.SIGTERM, _log_signal)
signal.signal(signal.SIGINT, _log_signal)

# Rate limiting configuration (from environment or defaults)
RATE_LIMIT_SEARCH, RATE_LIMIT_DEFAULT, RATE_LIMIT_FACETS = get_rate_limits()

PRELOAD_FACETS = os.environ.get("PRELOAD_FACETS", "true").lower() in (
    "1",
    "true",
    "yes",
)

# API Key Authentication
API_KEY = os.environ.get("API_SECRET_KEY")
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(request: Request, api_key: str = Depends(api_key_header)):
    """Verify the API key from request header"""
    if request.url.path == "/health":
        return None
    if not API_KEY:
        # If no API key configured, allow all requests (development mode)
        return None
    if not api_key or not secrets.compare_digest(api_key, API_KEY):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return api_key


# Disable docs in production (when API_KEY is set)
app = FastAPI(
    title="Document Faceted Search API",
    dependencies=[Depends(verify_api_key)],
    docs_url=None if API_KEY else "/docs",
    redoc_url=None if API_KEY else "/redoc",
    openapi_url=None if API_KEY else "/openapi.json",
)

# Add rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# Unknown dimension keys and similar bad input surface as ValueError
@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Convert ValueError to HTTP 400 Bad Request."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event():
    """Create the shared engine client and warm the facet catalog."""
    logger.info("API startup (pid=%s)", os.getpid())
    logger.info("Search engine: %s (index=%s)", MEILISEARCH_HOST, SEARCH_INDEX)
    logger.info(
        "Rate limits: search=%s default=%s facets=%s",
        RATE_LIMIT_SEARCH,
        RATE_LIMIT_DEFAULT,
        RATE_LIMIT_FACETS,
    )
    client = SearchEngineClient()
    app.state.engine_client = client
    app.state.context_registry = SearchContextRegistry()
    app.state.facet_catalog = FacetCatalog(client, index=SEARCH_INDEX)
    if PRELOAD_FACETS:
        await app.state.facet_catalog.load()
        logger.info("Facet catalog preloaded")
    else:
        logger.info("Skipping facet preload (PRELOAD_FACETS=false)")


@app.on_event("shutdown")
async def shutdown_event():
    logger.warning("API shutdown (pid=%s)", os.getpid())
    client = getattr(app.state, "engine_client", None)
    if client is not None:
        await client.aclose()


# CORS configuration - read allowed origins from environment
CORS_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
if not CORS_ORIGINS or CORS_ORIGINS == [""]:
    # Development fallback - localhost only
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(config_routes.router)
app.include_router(facets_routes.router)
app.include_router(search_routes.router)

if __name__ == "__main__":
    # Host configurable for security - 0.0.0.0 for Docker, 127.0.0.1 for local dev
    host = os.environ.get("API_HOST", "127.0.0.1")
    port = int(os.environ.get("API_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)
