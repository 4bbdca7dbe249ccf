"""Console logging: debug to warning on stdout, errors on stderr."""

from __future__ import annotations

import logging
import os
import sys
from typing import Iterable

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


class LevelFilter(logging.Filter):
    """Pass only records whose level is one of ``levels``."""

    def __init__(self, levels: Iterable[int]) -> None:
        super().__init__()
        self.levels = frozenset(levels)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno in self.levels


def init() -> logging.Logger:
    """Configure the package logger; ``NS_DEBUG`` switches on debug output."""
    logger = logging.getLogger("nebula_sync")
    raw = os.environ.get("NS_DEBUG", "")
    debug = raw in _TRUE

    caller = " %(filename)s:%(lineno)d >" if debug else ""
    formatter = logging.Formatter(
        f"%(asctime)s %(levelname)s{caller} %(message)s", datefmt="%Y-%m-%dT%H:%M:%S%z"
    )
    logger.handlers.clear()
    for stream, levels in (
        (sys.stdout, (logging.DEBUG, logging.INFO, logging.WARNING)),
        (sys.stderr, (logging.ERROR, logging.CRITICAL)),
    ):
        handler = logging.StreamHandler(stream)
        handler.addFilter(LevelFilter(levels))
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    if raw and not debug and raw not in _FALSE:
        logger.warning("failed to parse boolean env NS_DEBUG: invalid value %r", raw)
    return logger