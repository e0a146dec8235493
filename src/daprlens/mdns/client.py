"""Brief: Edge-triggered DNS-SD browser for a single service type.

Inputs:
  - A Transport (normally MulticastTransport) delivering MdnsPacket objects.

Outputs:
  - on_service_up / on_service_down notifications, each fired exactly once per
    transition of a service instance.

Notes:
  - Records are correlated within one packet only. SRV/TXT/A records that a
    responder splits across packets are not stitched together; a PTR whose
    SRV arrives later stays unresolved until a later packet carries both.
  - Once an instance is registered, later sightings never replace it nor
    re-fire an up event, even when they carry different SRV/TXT/A data.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Protocol, Tuple

from ..events import EventEmitter, Subscription
from .records import (
    address_literal,
    is_address_record,
    is_pointer_record,
    is_server_record,
    is_text_record,
    normalize_name,
    pointer_target,
    record_owner,
    server_port,
    server_target,
    text_entries,
)
from .registry import ServiceRecord, ServiceRegistry
from .transport import MdnsPacket, MulticastTransport, TransportError

logger = logging.getLogger(__name__)

ServiceListener = Callable[[ServiceRecord], None]


class QueryError(Exception):
    """
    Brief: The discovery query could not be transmitted.

    Inputs:
    - message: description

    Outputs:
    - Exception instance (chained from the underlying TransportError)
    """

    pass


class ClientClosedError(RuntimeError):
    """Raised when start() is called on a client that has been closed."""


class Transport(Protocol):
    """Brief: What MdnsClient needs from a multicast session."""

    def query(self, service_type: str) -> None: ...

    def subscribe(self, listener: Callable[[MdnsPacket], None]) -> Subscription: ...

    def close(self) -> None: ...


class MdnsClient:
    """Brief: Track which instances of one DNS-SD service type are up.

    Inputs:
      - transport: Optional Transport; a MulticastTransport is created when
        omitted. The client owns it and closes it in close().

    Outputs:
      - MdnsClient instance.

    Example:
      >>> client = MdnsClient(transport=fake_transport)  # doctest: +SKIP
      >>> sub = client.on_service_up(lambda s: print(s.name, s.port))  # doctest: +SKIP
      >>> client.start("_dapr._tcp.local")  # doctest: +SKIP
    """

    def __init__(self, transport: Optional[Transport] = None) -> None:
        self._transport: Transport = (
            transport if transport is not None else MulticastTransport()
        )
        self._registry = ServiceRegistry()
        self._service_up: EventEmitter[ServiceRecord] = EventEmitter("service-up")
        self._service_down: EventEmitter[ServiceRecord] = EventEmitter(
            "service-down"
        )
        self._packet_subscription: Optional[Subscription] = None
        self._service_type: Optional[str] = None
        self._lock = threading.RLock()
        self._closed = False

    @property
    def service_type(self) -> Optional[str]:
        return self._service_type

    @property
    def running(self) -> bool:
        return self._packet_subscription is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def services(self) -> List[ServiceRecord]:
        """Snapshot of the currently registered service records."""

        with self._lock:
            return list(self._registry)

    def on_service_up(self, listener: ServiceListener) -> Subscription:
        return self._service_up.subscribe(listener)

    def on_service_down(self, listener: ServiceListener) -> Subscription:
        return self._service_down.subscribe(listener)

    def start(self, service_type: str) -> None:
        """Brief: (Re)start browsing service_type and send one PTR query.

        Inputs:
          - service_type: DNS-SD service type, e.g. ``_dapr._tcp.local``.

        Outputs:
          - None once the query has been transmitted. Responses arrive later
            on the transport thread.

        Raises:
          - ClientClosedError after close().
          - QueryError when the transport fails to send. On this or any other
            error the client is left stopped and the error propagates.
        """

        with self._lock:
            if self._closed:
                raise ClientClosedError("mDNS client has been closed")

            self.stop()

            self._service_type = service_type
            self._packet_subscription = self._transport.subscribe(self.handle_packet)

        logger.info("mDNS client browsing %s", service_type)
        try:
            self._transport.query(service_type)
        except TransportError as e:
            self.stop()
            raise QueryError(f"PTR query for {service_type} failed: {e}") from e
        except Exception:
            self.stop()
            raise

    def stop(self) -> None:
        """Brief: Stop listening and forget every tracked service silently.

        Inputs:
          - None.

        Outputs:
          - None. No down events are fired. Safe when not started.
        """

        with self._lock:
            subscription, self._packet_subscription = self._packet_subscription, None
            if subscription is not None:
                subscription.dispose()
                logger.info("mDNS client stopped browsing %s", self._service_type)
            self._registry.clear()

    def close(self) -> None:
        """Brief: Stop, detach all listeners, then release the transport.

        Inputs:
          - None.

        Outputs:
          - None. Idempotent; the client cannot be restarted afterwards.
        """

        with self._lock:
            if self._closed:
                return
            self.stop()
            self._closed = True
            self._service_up.dispose()
            self._service_down.dispose()
        self._transport.close()
        logger.info("mDNS client closed")

    def handle_packet(self, packet: MdnsPacket) -> None:
        """Brief: Correlate one packet's records and fire up/down transitions.

        Inputs:
          - packet: MdnsPacket whose answers are dnslib RR objects.

        Outputs:
          - None. Fires on_service_up for newly resolved instances (in PTR
            order) and then on_service_down for withdrawn, registered ones.
            An instance both added and withdrawn by this packet ends up
            unregistered and only its down event fires.
        """

        with self._lock:
            if self._packet_subscription is None or self._service_type is None:
                return
            bound_type = normalize_name(self._service_type)
            answers = list(packet.answers)

            up_candidates: List[ServiceRecord] = []
            down_candidates: List[str] = []
            for rr in answers:
                if not is_pointer_record(rr):
                    continue
                if normalize_name(record_owner(rr)) != bound_type:
                    continue
                name = pointer_target(rr)
                if rr.ttl:
                    up_candidates.append(ServiceRecord(name=name))
                else:
                    down_candidates.append(name)

            transitions: List[Tuple[EventEmitter[ServiceRecord], ServiceRecord]] = []
            for service in up_candidates:
                self._resolve(service, answers)
                if not service.resolved:
                    logger.debug("mDNS instance %s seen without SRV; ignoring", service.name)
                    continue
                if self._registry.insert_if_absent(service):
                    logger.debug(
                        "mDNS service up: %s -> %s:%s (%s)",
                        service.name,
                        service.fqdn,
                        service.port,
                        service.address or "no address",
                    )
                    transitions.append((self._service_up, service))

            for name in down_candidates:
                removed = self._registry.remove(name)
                if removed is None:
                    continue
                logger.debug("mDNS service down: %s", removed.name)
                # Added and withdrawn by the same packet: only the down edge
                # is reported.
                transitions = [t for t in transitions if t[1] is not removed]
                transitions.append((self._service_down, removed))

        # Listeners run outside the lock so they may call back into the client
        # or into code that is itself waiting on start().
        for emitter, service in transitions:
            emitter.fire(service)

    @staticmethod
    def _resolve(service: ServiceRecord, answers: List) -> None:
        # Last matching record wins for each field.
        key = normalize_name(service.name)
        for rr in answers:
            if normalize_name(record_owner(rr)) != key:
                continue
            if is_server_record(rr):
                service.fqdn = server_target(rr)
                service.port = server_port(rr)
            elif is_text_record(rr):
                service.text = text_entries(rr)

        if not service.fqdn:
            return
        host = normalize_name(service.fqdn)
        for rr in answers:
            if is_address_record(rr) and normalize_name(record_owner(rr)) == host:
                service.address = address_literal(rr)
