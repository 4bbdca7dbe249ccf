"""Fixed-delay retries for calls to replicas."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

ATTEMPTS_POST_TELEPORTER = 5
ATTEMPTS_PATCH_CONFIG = 5
ATTEMPTS_POST_RUN_GRAVITY = 5
ATTEMPTS_POST_AUTH = 3
ATTEMPTS_DELETE_SESSION = 3

_log = logging.getLogger(__name__)
_delay = 0.0

T = TypeVar("T")


def init(client_config: Any) -> None:
    """Set the delay between attempts from the client's ``retry_delay`` seconds."""
    global _delay
    _delay = float(client_config.retry_delay)


def fixed(func: Callable[[], T], attempts: int) -> T:
    """Call ``func`` up to ``attempts`` times, waiting a fixed delay between tries.

    Only the last error is raised when every attempt fails.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    for attempt in range(attempts):
        try:
            return func()
        except Exception as exc:
            _log.debug("Retrying(%d): %s", attempt + 1, exc)
            if attempt == attempts - 1:
                raise
            time.sleep(_delay)
    raise AssertionError("unreachable")