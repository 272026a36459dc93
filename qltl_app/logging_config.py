"""
Logging setup for the dashboard process.

Streamlit re-executes the entry script on every interaction, so setup is
idempotent: the handler is attached only once per process.
"""
from __future__ import annotations
import logging
import sys
from typing import Optional

from .config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "qltl-stderr"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``qltl_app`` logger and return it."""
    logger = logging.getLogger("qltl_app")
    logger.setLevel((level or settings.log_level).upper())

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logger
