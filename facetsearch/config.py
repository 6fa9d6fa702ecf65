"""Search engine connection settings and search-context configuration."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Search engine configuration
MEILISEARCH_HOST = os.getenv("MEILISEARCH_HOST", "http://localhost:7700")
MEILISEARCH_API_KEY = os.getenv("MEILISEARCH_API_KEY", "masterKey")
SEARCH_INDEX = os.getenv("SEARCH_INDEX", "document_stores")

# Quiet window for filter/text-driven searches
SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))
SEARCH_TIMEOUT_SECONDS = float(os.getenv("SEARCH_TIMEOUT_SECONDS", "12"))

# Unconstrained value-range span; values outside it cannot be reached by the
# range filter.
VALUE_RANGE_MIN = 0
VALUE_RANGE_MAX = 1_000_000

DATE_FIELD = "Last_Stage_Change_Date"
VALUE_FIELD = "value"

SEARCH_HISTORY_PATH = os.getenv("SEARCH_HISTORY_PATH", "search_history.json")
SEARCH_HISTORY_LIMIT = int(os.getenv("SEARCH_HISTORY_LIMIT", "10"))

_search_config: Dict[str, Any] = {}


def _config_path() -> Path:
    env_path = os.getenv("FACETSEARCH_CONFIG")
    if env_path:
        return Path(env_path)
    return Path(__file__).resolve().parents[1] / "config.json"


def load_search_config() -> Dict[str, Any]:
    """Load the optional ``config.json`` holding context overrides."""
    global _search_config
    config_path = _config_path()
    if not config_path.exists():
        logger.info("Config file %s not found. Using defaults.", config_path)
        _search_config = {}
        return _search_config

    with open(config_path, encoding="utf-8") as handle:
        _search_config = json.load(handle)
    return _search_config


def get_search_config() -> Dict[str, Any]:
    if not _search_config:
        return load_search_config()
    return _search_config


def get_context_overrides() -> Dict[str, Dict[str, Any]]:
    """Return per-route overrides from the ``search_contexts`` block."""
    overrides = get_search_config().get("search_contexts", {})
    if not isinstance(overrides, dict):
        logger.warning("Ignoring search_contexts: expected an object")
        return {}
    return overrides
