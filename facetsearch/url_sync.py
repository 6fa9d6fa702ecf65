"""Two-way binding between search state and the address bar query string."""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

logger = logging.getLogger(__name__)

SEARCH_TERM_PARAM = "searchTerm"
DOCUMENT_PARAM = "proposalId"
GLOBAL_PARAM = "globalSearch"
OWNED_PARAMS = (SEARCH_TERM_PARAM, DOCUMENT_PARAM, GLOBAL_PARAM)

# Characters encodeURIComponent leaves as they are, beyond the ones quote keeps.
_COMPONENT_SAFE = "!*'()"


@dataclass(frozen=True)
class UrlState:
    search_term: str = ""
    document_id: Optional[str] = None
    global_search: bool = False
    # Parameters owned by other components, kept in their original order.
    extra: Tuple[Tuple[str, str], ...] = ()
    # Decoded key sequence; None marks the position of the next ``extra`` item.
    order: Tuple[Optional[str], ...] = field(default=(), compare=False)


def _owned_value(state: UrlState, key: str) -> Optional[str]:
    if key == SEARCH_TERM_PARAM:
        return state.search_term or None
    if key == DOCUMENT_PARAM:
        return state.document_id or None
    return "true" if state.global_search else None


def encode(state: UrlState) -> str:
    """
    Query string for ``state`` (no leading ``?``); empty values are omitted.

    Parameters keep the position they were decoded at; new ones are appended.
    """
    params: List[Tuple[str, str]] = []
    extra = list(state.extra)
    written = set()
    for key in state.order:
        if key is None:
            if extra:
                params.append(extra.pop(0))
            continue
        value = _owned_value(state, key)
        if value is not None and key not in written:
            params.append((key, value))
            written.add(key)
    for key in OWNED_PARAMS:
        value = _owned_value(state, key)
        if value is not None and key not in written:
            params.append((key, value))
    params.extend(extra)
    return urlencode(params, safe=_COMPONENT_SAFE, quote_via=quote)


def _query_part(url: str) -> str:
    if "://" in url or url.startswith("/") or "?" in url:
        return urlsplit(url).query
    return url


def decode(url: str) -> UrlState:
    """Parse a query string, a path (with or without query), or a full URL."""
    search_term = ""
    document_id = None
    global_search = False
    extra: List[Tuple[str, str]] = []
    order: List[Optional[str]] = []
    for key, value in parse_qsl(_query_part(url), keep_blank_values=True):
        if key == SEARCH_TERM_PARAM:
            search_term = value
        elif key == DOCUMENT_PARAM:
            document_id = value or None
        elif key == GLOBAL_PARAM:
            global_search = value == "true"
        else:
            extra.append((key, value))
            order.append(None)
            continue
        order.append(key)
    return UrlState(
        search_term=search_term,
        document_id=document_id,
        global_search=global_search,
        extra=tuple(extra),
        order=tuple(order),
    )


def build_url(pathname: str, state: UrlState) -> str:
    query = encode(state)
    return f"{pathname}?{query}" if query else pathname


class InMemoryHistory:
    """Navigation history; ``shallow`` updates never reload server data."""

    def __init__(self, url: str = "/"):
        self.entries: List[str] = [url]
        self.reloads = 0

    @property
    def current(self) -> str:
        return self.entries[-1]

    def replace(self, url: str, shallow: bool = True) -> None:
        self.entries[-1] = url
        if not shallow:
            self.reloads += 1

    def push(self, url: str, shallow: bool = True) -> None:
        self.entries.append(url)
        if not shallow:
            self.reloads += 1

    def back(self) -> str:
        if len(self.entries) > 1:
            self.entries.pop()
        return self.current


class URLSync:
    """
    Sole owner of the URL.

    State flows to the URL through ``reflect`` and from it through
    ``hydrate``; a reflect issued while hydrating is ignored so the two
    directions never feed each other.
    """

    def __init__(self, history, pathname: Optional[str] = None):
        self.history = history
        self.pathname = pathname or urlsplit(history.current).path or "/"
        self._hydrating = False

    def navigate(self, pathname: str) -> None:
        """Follow a route change; the router may already be on ``pathname``."""
        self.pathname = pathname
        if urlsplit(self.history.current).path != pathname:
            self.history.push(pathname, shallow=False)

    def current_state(self) -> UrlState:
        return decode(self.history.current)

    def hydrate(self, url: Optional[str] = None) -> UrlState:
        """Read state at mount or after an external navigation."""
        self._hydrating = True
        try:
            state = decode(url if url is not None else self.history.current)
            logger.debug("Hydrated URL state: %s", state)
            return state
        finally:
            self._hydrating = False

    def reflect(
        self,
        search_term: Optional[str] = None,
        document_id: Optional[str] = None,
        global_search: Optional[bool] = None,
    ) -> Optional[str]:
        """
        Write the given fields to the URL, keeping the others as they are.

        Opening a document preview pushes a history entry; every other change
        replaces the current one. Returns the new URL, or None when nothing
        changed.
        """
        current = self.current_state()
        updated = replace(
            current,
            search_term=current.search_term if search_term is None else search_term,
            document_id=current.document_id if document_id is None else document_id,
            global_search=(
                current.global_search if global_search is None else global_search
            ),
        )
        return self._write(current, updated)

    def close_document(self) -> Optional[str]:
        current = self.current_state()
        return self._write(current, replace(current, document_id=None))

    def clear(self) -> Optional[str]:
        """Drop every query parameter, staying on the current page."""
        return self._write(self.current_state(), UrlState())

    def _write(self, current: UrlState, updated: UrlState) -> Optional[str]:
        if self._hydrating:
            return None
        url = build_url(self.pathname, updated)
        if url == self.history.current:
            return None
        opens_preview = bool(updated.document_id) and (
            updated.document_id != current.document_id
        )
        if opens_preview:
            self.history.push(url, shallow=True)
        else:
            self.history.replace(url, shallow=True)
        return url
