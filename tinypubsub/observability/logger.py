"""Structured logging for registry events (subscribe, publish, prune, unsubscribe)."""

import logging
import sys
from typing import Optional

from tinypubsub.config import get_settings

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return a logger with a stdout handler attached on first use.

    When no level is given the configured PUBSUB_LOG_LEVEL applies.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level if level is not None else get_settings().log_level_no)
    elif level is not None:
        logger.setLevel(level)
    return logger
