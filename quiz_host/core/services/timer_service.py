"""Clock and one-shot timer facility used by the session engine."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules delayed callbacks and reports the current unix time."""

    def now(self) -> float: ...

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Runs each callback on its own daemon ``threading.Timer``."""

    def now(self) -> float:
        return time.time()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.name = f"SessionTimer-{delay_seconds:g}s"
        timer.start()
        logger.debug("Scheduled %s", timer.name)
        return timer
