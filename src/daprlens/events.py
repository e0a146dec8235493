"""Brief: Minimal typed event emitter with explicit subscription handles.

Inputs:
  - Listeners registered via EventEmitter.subscribe().

Outputs:
  - Subscription handles that revoke a listener when disposed.

Notes:
  - Dispatch is synchronous and happens on the thread calling fire().
  - A listener that raises is logged and skipped; fire() never raises.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Brief: Handle returned by EventEmitter.subscribe().

    Inputs:
      - revoke: Callable invoked once on the first dispose().

    Outputs:
      - Subscription instance; dispose() is idempotent.
    """

    __slots__ = ("_revoke", "_lock")

    def __init__(self, revoke: Callable[[], None]) -> None:
        self._revoke: Optional[Callable[[], None]] = revoke
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._revoke is not None

    def dispose(self) -> None:
        with self._lock:
            revoke, self._revoke = self._revoke, None
        if revoke is not None:
            revoke()


class EventEmitter(Generic[T]):
    """Brief: Fan-out event stream with any number of listeners.

    Inputs:
      - name: Optional label used in log messages.

    Outputs:
      - EventEmitter instance.

    Example:
      >>> seen = []
      >>> emitter = EventEmitter()
      >>> sub = emitter.subscribe(seen.append)
      >>> emitter.fire(1)
      >>> sub.dispose()
      >>> emitter.fire(2)
      >>> seen
      [1]
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: Listener) -> Subscription:
        """Brief: Register a listener and return its revocation handle.

        Inputs:
          - listener: Callable taking the event payload.

        Outputs:
          - Subscription: dispose() removes exactly this registration.

        Raises:
          - RuntimeError when the emitter has been disposed.
        """

        # Wrap so the same callable can be registered twice and each handle
        # removes only its own registration.
        def entry(value):  # type: ignore[no-untyped-def]
            listener(value)

        with self._lock:
            if self._disposed:
                raise RuntimeError(f"event emitter {self.name!r} is disposed")
            self._listeners.append(entry)

        def revoke() -> None:
            with self._lock:
                try:
                    self._listeners.remove(entry)
                except ValueError:
                    pass

        return Subscription(revoke)

    def fire(self, value: T) -> None:
        """Brief: Deliver value to every listener in subscription order.

        Inputs:
          - value: Event payload.

        Outputs:
          - None.
        """

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.exception("Listener for event %r raised", self.name)

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            self._listeners.clear()
