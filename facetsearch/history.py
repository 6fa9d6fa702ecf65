"""Persisted free-text search history and recently viewed documents."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from facetsearch.config import SEARCH_HISTORY_LIMIT, SEARCH_HISTORY_PATH

logger = logging.getLogger(__name__)


class SearchHistory:
    """
    Most-recent-first lists stored in one JSON file.

    Searches are de-duplicated case-insensitively; viewed documents by id.
    A missing or unreadable file starts an empty history.
    """

    def __init__(
        self,
        path: Union[str, Path, None] = SEARCH_HISTORY_PATH,
        limit: int = SEARCH_HISTORY_LIMIT,
    ):
        self.path = Path(path) if path else None
        self.limit = limit
        self.searches: List[str] = []
        self.viewed: List[Dict[str, Any]] = []
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error loading search history from %s: %s", self.path, e)
            return
        self.searches = [str(s) for s in data.get("searches", [])][: self.limit]
        self.viewed = list(data.get("viewed", []))[: self.limit]

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({"searches": self.searches, "viewed": self.viewed}, f)
        except OSError as e:
            logger.error("Error saving search history to %s: %s", self.path, e)

    def record_search(self, term: str) -> None:
        term = (term or "").strip()
        if not term:
            return
        rest = [s for s in self.searches if s.lower() != term.lower()]
        self.searches = [term] + rest[: self.limit - 1]
        self._save()

    def remove_search(self, term: str) -> None:
        self.searches = [s for s in self.searches if s.lower() != term.lower()]
        self._save()

    def record_view(self, document: Dict[str, Any]) -> None:
        doc_id = document.get("id")
        item = {**document, "viewedAt": datetime.now(timezone.utc).isoformat()}
        rest = [v for v in self.viewed if v.get("id") != doc_id]
        self.viewed = [item] + rest[: self.limit - 1]
        self._save()

    def remove_view(self, doc_id: Any) -> None:
        self.viewed = [v for v in self.viewed if v.get("id") != doc_id]
        self._save()

    def clear(self, kind: Optional[str] = None) -> None:
        if kind in (None, "searches"):
            self.searches = []
        if kind in (None, "viewed"):
            self.viewed = []
        self._save()
