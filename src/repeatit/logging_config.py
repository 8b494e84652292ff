"""Logging setup for the repeatit command line."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAMESPACE = "repeatit"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = "WARNING"


def setup_logging(level: str = DEFAULT_LEVEL, stream: TextIO | None = None) -> None:
    """Configure the ``repeatit`` logger namespace.

    Log records go to stderr so they never mix with the drill output.
    Unknown level names fall back to WARNING.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False
