"""Brief: Dapr application discovery over mDNS/DNS-SD.

Inputs:
  - An MdnsClient factory and the Dapr DNS-SD service type.

Outputs:
  - MdnsApplicationProvider keeping a list of DaprApplication objects in sync
    with the client's service up/down events.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from ..events import EventEmitter, Subscription
from ..mdns.client import MdnsClient, QueryError
from ..mdns.registry import ServiceRecord
from .base import DAPR_SERVICE_TYPE, DaprApplication

logger = logging.getLogger(__name__)


def _parse_text(entries: List[str]) -> Dict[str, str]:
    # First occurrence wins; entries that are not exactly "key=value" are
    # ignored (a value containing "=" is not a valid pair).
    parsed: Dict[str, str] = {}
    for entry in entries:
        parts = entry.split("=")
        if len(parts) != 2:
            continue
        parsed.setdefault(parts[0], parts[1])
    return parsed


def service_to_application(service: ServiceRecord) -> Optional[DaprApplication]:
    """Brief: Translate a resolved service record into a DaprApplication.

    Inputs:
      - service: ServiceRecord whose TXT entries carry ``appId`` and
        ``httpPort``.

    Outputs:
      - DaprApplication, or None when appId is missing/empty or httpPort is
        missing or not a non-negative integer.

    Example:
      >>> service_to_application(ServiceRecord(name="a", fqdn="h",
      ...     text=["appId=myapp", "httpPort=3501"]))
      DaprApplication(app_id='myapp', http_port=3501, pid=None)
    """

    parsed = _parse_text(service.text)
    app_id = parsed.get("appId")
    http_port = parsed.get("httpPort")
    if not app_id or not http_port or not http_port.isdigit():
        return None
    return DaprApplication(app_id=app_id, http_port=int(http_port))


class MdnsApplicationProvider:
    """Brief: DaprApplicationProvider backed by a lazily started MdnsClient.

    Inputs:
      - client_factory: Zero-argument callable returning a new MdnsClient.
      - service_type: DNS-SD service type to browse.
      - start_attempts: How many times to try the initial query (>= 1).
      - retry_backoff_ms: Delay before the second attempt; doubles after each
        further failure.
      - sleep: Sleep function used between attempts (tests inject a no-op).

    Outputs:
      - MdnsApplicationProvider instance. No network activity happens until
        the first get_applications() call.

    Notes:
      - Packet handling runs on the transport thread. The application list is
        guarded by its own lock, and client creation by a separate lock, so a
        listener never waits on a caller that is starting the client.
    """

    def __init__(
        self,
        client_factory: Callable[[], MdnsClient] = MdnsClient,
        service_type: str = DAPR_SERVICE_TYPE,
        start_attempts: int = 1,
        retry_backoff_ms: int = 250,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client_factory = client_factory
        self.service_type = service_type
        self.start_attempts = max(1, int(start_attempts))
        self.retry_backoff_ms = max(0, int(retry_backoff_ms))
        self._sleep = sleep

        self._applications: List[DaprApplication] = []
        self._lock = threading.RLock()
        self._client_lock = threading.RLock()
        self._client: Optional[MdnsClient] = None
        self._client_subscriptions: List[Subscription] = []
        self._on_did_change: EventEmitter[None] = EventEmitter("applications-changed")

    def on_did_change(self, listener: Callable[[None], None]) -> Subscription:
        return self._on_did_change.subscribe(listener)

    def get_applications(self, refresh: bool = False) -> List[DaprApplication]:
        """Brief: Return the applications currently advertised over mDNS.

        Inputs:
          - refresh: When True and the client is already running, restart it
            (the list is cleared and a new query is sent).

        Outputs:
          - list[DaprApplication]: Snapshot of the current list. On the first
            call this is usually empty; answers arrive asynchronously and are
            announced through on_did_change.

        Raises:
          - QueryError when every start attempt fails. The failed client is
            discarded (also on a failed refresh) so a later call starts a
            new one.
        """

        cleared = False
        try:
            with self._client_lock:
                if self._client is None:
                    self._client = self._create_and_start_client()
                elif refresh:
                    with self._lock:
                        self._applications.clear()
                    cleared = True
                    try:
                        self._start_with_retry(self._client)
                    except Exception:
                        client, self._client = self._client, None
                        self._release_client(client)
                        raise
        finally:
            if cleared:
                self._on_did_change.fire(None)

        with self._lock:
            return list(self._applications)

    def _create_and_start_client(self) -> MdnsClient:
        client = self._client_factory()
        self._client_subscriptions = [
            client.on_service_up(self._on_service_up),
            client.on_service_down(self._on_service_down),
        ]
        try:
            self._start_with_retry(client)
        except Exception:
            self._release_client(client)
            raise
        return client

    def _start_with_retry(self, client: MdnsClient) -> None:
        delay = self.retry_backoff_ms / 1000.0
        for attempt in range(1, self.start_attempts + 1):
            try:
                client.start(self.service_type)
                return
            except QueryError as e:
                if attempt >= self.start_attempts:
                    logger.warning(
                        "mDNS discovery of %s failed after %d attempt(s): %s",
                        self.service_type,
                        attempt,
                        e,
                    )
                    raise
                logger.info(
                    "mDNS query attempt %d/%d failed (%s); retrying in %.3fs",
                    attempt,
                    self.start_attempts,
                    e,
                    delay,
                )
                self._sleep(delay)
                delay *= 2

    def _release_client(self, client: MdnsClient) -> None:
        for sub in self._client_subscriptions:
            sub.dispose()
        self._client_subscriptions = []
        client.close()

    def _on_service_up(self, service: ServiceRecord) -> None:
        application = service_to_application(service)
        if application is None:
            logger.debug("Ignoring mDNS service %s without appId/httpPort", service.name)
            return

        with self._lock:
            for index, existing in enumerate(self._applications):
                if existing.app_id == application.app_id:
                    self._applications[index] = application
                    break
            else:
                self._applications.append(application)
        logger.info(
            "Dapr application up: %s (http port %d)", application.app_id, application.http_port
        )
        self._on_did_change.fire(None)

    def _on_service_down(self, service: ServiceRecord) -> None:
        application = service_to_application(service)
        if application is None:
            return

        removed = False
        with self._lock:
            for index, existing in enumerate(self._applications):
                if existing.app_id == application.app_id:
                    del self._applications[index]
                    removed = True
                    break
        if removed:
            logger.info("Dapr application down: %s", application.app_id)
            self._on_did_change.fire(None)

    def close(self) -> None:
        """Brief: Detach from and close the client, then drop change listeners."""

        with self._client_lock:
            client, self._client = self._client, None
            if client is not None:
                self._release_client(client)
        self._on_did_change.dispose()
