"""
Pytest configuration for test suite
"""

import inspect
import sys
from pathlib import Path

import pytest

# Add project root to path so tests can import project modules
project_root = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(project_root))


class FakeEngine:
    """
    Stand-in for SearchEngineClient.

    ``handler(index, query, options)`` builds each search payload and may be a
    coroutine function, so tests can hold a response back or raise.
    """

    def __init__(self, handler=None):
        self.handler = handler or (lambda index, query, options: self.payload())
        self.calls = []
        self.stats_calls = 0
        self.stats_error = None

    @staticmethod
    def payload(hits=None, total=None, facets=None, query=""):
        hits = hits or []
        return {
            "hits": hits,
            "estimatedTotalHits": len(hits) if total is None else total,
            "facetDistribution": facets or {},
            "processingTimeMs": 3,
            "query": query,
        }

    @property
    def result_calls(self):
        """Searches other than zero-hit facet discovery."""
        return [c for c in self.calls if c["options"].get("limit") != 0]

    async def search(self, index, query, options=None):
        options = options or {}
        self.calls.append({"index": index, "query": query, "options": options})
        result = self.handler(index, query, options)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def get_stats(self, index):
        self.stats_calls += 1
        if self.stats_error is not None:
            raise self.stats_error
        return {"numberOfDocuments": 1, "isIndexing": False}

    async def aclose(self):
        return None


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def engine_factory():
    return FakeEngine
