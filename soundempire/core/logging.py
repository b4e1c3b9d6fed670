"""
Logging setup for the career engine.

Call `setup_logging()` once at startup; every module then uses
`logging.getLogger(__name__)` and inherits the `soundempire` handler.
"""
from __future__ import annotations

import logging
import sys

ROOT_LOGGER = "soundempire"

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    return logger
