"""Logging utilities for the fx_converter package."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "fx_converter") -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _LOGGER = logging.getLogger("fx_converter")
    return logging.getLogger(name)


def set_verbosity(verbose: bool) -> None:
    """Switch the package loggers between INFO and DEBUG."""

    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)
