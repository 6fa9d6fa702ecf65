"""Logging configuration for the search layer and its HTTP surface."""

import logging
import os
from logging.handlers import RotatingFileHandler

from facetsearch.logging_utils import ContextFilter


def setup_logging(name: str = "facetsearch") -> logging.Logger:
    """Setup logging to file and console."""
    log_file = None

    if os.path.exists("/app/logs"):
        log_file = f"/app/logs/{name}.log"
    elif os.path.exists("logs"):
        log_file = f"logs/{name}.log"

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        # Rotate logs: keep 3 backups, max 10MB each
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=3)
        )

    context_filter = ContextFilter()
    for handler in handlers:
        handler.addFilter(context_filter)

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - [%(scope)s] - %(levelname)s - %(name)s - %(message)s",
        handlers=handlers,
        force=True,
    )
    return logging.getLogger(name)
