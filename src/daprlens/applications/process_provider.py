"""Brief: Dapr application discovery by polling the local process table.

Inputs:
  - A process lister and a repeating-timer factory.

Outputs:
  - ProcessApplicationProvider rebuilding its application list from daprd
    command lines on every poll.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Protocol

from ..events import EventEmitter, Subscription
from ..processes import ProcessInfo, PsutilProcessLister
from ..timer import schedule_repeating
from .base import DAPR_PROCESS_NAME, DEFAULT_HTTP_PORT, DaprApplication
from .cmdline import to_application

logger = logging.getLogger(__name__)


class ProcessLister(Protocol):
    def list_processes(self, name: str) -> List[ProcessInfo]: ...


TimerFactory = Callable[[int, Callable[[], None]], Any]


class ProcessApplicationProvider:
    """Brief: DaprApplicationProvider backed by periodic process-table polls.

    Inputs:
      - process_lister: Object with list_processes(name); defaults to
        PsutilProcessLister.
      - process_name: Executable name to look for.
      - interval_ms: Poll interval of the background timer.
      - default_http_port: Port assumed when ``--dapr-http-port`` is absent.
      - timer_factory: schedule_repeating-compatible callable returning a
        handle with cancel().

    Outputs:
      - ProcessApplicationProvider instance; the polling timer starts
        immediately.

    Notes:
      - on_did_change fires after every successful poll, even when the list
        did not change.
    """

    def __init__(
        self,
        process_lister: Optional[ProcessLister] = None,
        process_name: str = DAPR_PROCESS_NAME,
        interval_ms: int = 2000,
        default_http_port: int = DEFAULT_HTTP_PORT,
        timer_factory: TimerFactory = schedule_repeating,
    ) -> None:
        self._process_lister = process_lister or PsutilProcessLister()
        self.process_name = process_name
        self.default_http_port = int(default_http_port)

        self._applications: Optional[List[DaprApplication]] = None
        self._lock = threading.Lock()
        self._current_refresh: Optional[Future] = None
        self._on_did_change: EventEmitter[None] = EventEmitter("applications-changed")
        self._timer = timer_factory(int(interval_ms), self._on_timer)

    def on_did_change(self, listener: Callable[[None], None]) -> Subscription:
        return self._on_did_change.subscribe(listener)

    def get_applications(self, refresh: bool = False) -> List[DaprApplication]:
        """Brief: Return the applications found by the latest successful poll.

        Inputs:
          - refresh: Force a poll before returning.

        Outputs:
          - list[DaprApplication]: Current list (a poll runs first when none
            has completed yet).

        Raises:
          - Whatever the process lister raised when the poll this call
            waited on failed. The previous list is kept.
        """

        if self._applications is None or refresh:
            self.refresh()
        with self._lock:
            return list(self._applications or [])

    def refresh(self) -> None:
        """Brief: Poll the process table, joining a poll already in flight.

        Inputs:
          - None.

        Outputs:
          - None. Every caller overlapping one poll observes that poll's
            outcome (including its exception). The change event fires once
            per successful poll, after the poll is no longer in flight, so
            listeners may call refresh() themselves.
        """

        with self._lock:
            future = self._current_refresh
            owner = future is None
            if owner:
                future = self._current_refresh = Future()

        if owner:
            try:
                self._on_refresh()
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(None)
            finally:
                with self._lock:
                    self._current_refresh = None

        future.result()
        if owner:
            self._on_did_change.fire(None)

    def _on_refresh(self) -> None:
        processes = self._process_lister.list_processes(self.process_name)
        applications: List[DaprApplication] = []
        for process in processes:
            application = to_application(process.cmd, process.pid, self.default_http_port)
            if application is not None:
                applications.append(application)

        with self._lock:
            self._applications = applications
        logger.debug("Process poll found %d Dapr application(s)", len(applications))

    def _on_timer(self) -> None:
        try:
            self.refresh()
        except Exception:
            logger.warning("Periodic process poll failed", exc_info=True)

    def close(self) -> None:
        self._timer.cancel()
        self._on_did_change.dispose()
