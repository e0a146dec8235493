from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Brief: Invoke a callback every interval on a daemon thread.

    Inputs:
      - interval_ms: Delay between invocations in milliseconds (> 0).
      - callback: Zero-argument callable. Exceptions are logged and the loop
        keeps running.
      - name: Thread name.

    Outputs:
      - RepeatingTimer instance; call start() to begin and cancel() to stop.
    """

    def __init__(
        self, interval_ms: int, callback: Callable[[], None], name: str = "RepeatingTimer"
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.interval_seconds = interval_ms / 1000.0
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._name = name

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> "RepeatingTimer":
        if self._thread is not None and self._thread.is_alive():
            return self
        self._thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
        self._thread.start()
        return self

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self._callback()
            except Exception:
                logger.info("%s: callback failed", self._name, exc_info=True)

    def cancel(self) -> None:
        self._stop_event.set()


def schedule_repeating(interval_ms: int, callback: Callable[[], None]) -> RepeatingTimer:
    """Brief: Start and return a RepeatingTimer; cancel() stops it."""

    return RepeatingTimer(interval_ms, callback).start()
