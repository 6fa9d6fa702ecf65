"""Logging helpers for search scope context."""

import contextvars
import logging

_log_scope: contextvars.ContextVar[str] = contextvars.ContextVar(
    "search_scope", default="N/A"
)


class ContextFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """
    Filter to inject the active search scope into log records.
    """

    def filter(self, record):
        record.scope = _log_scope.get()
        return True


def set_log_scope(scope: str) -> None:
    _log_scope.set(scope)
