"""Wall-clock safety timeout for a whole run.

This is a coarse guard, not cancellation: on expiry the process is
terminated and in-flight child processes are left to the runner to reap.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30 * 60
TIMEOUT_EXIT_CODE = 124


def _terminate(timeout_seconds: float) -> None:
    logger.error("Run exceeded the %.0f second safety timeout; terminating.", timeout_seconds)
    logging.shutdown()
    os._exit(TIMEOUT_EXIT_CODE)


class Watchdog:
    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS, *, on_expire: Callable[[], None] | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self._on_expire = on_expire if on_expire is not None else (lambda: _terminate(timeout_seconds))
        self._timer: threading.Timer | None = None

    def start(self) -> "Watchdog":
        if self._timer is None:
            self._timer = threading.Timer(self.timeout_seconds, self._on_expire)
            self._timer.daemon = True
            self._timer.start()
        return self

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __enter__(self) -> "Watchdog":
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()
