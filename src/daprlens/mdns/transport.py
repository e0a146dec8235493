"""Brief: Multicast UDP session for mDNS queries and responses.

Inputs:
  - Service types to query and packet listeners.

Outputs:
  - MdnsPacket objects (dnslib resource records) delivered to listeners from a
    single background receive thread.

Notes:
  - The socket is bound lazily on the first query() so that constructing a
    transport never touches the network.
"""

from __future__ import annotations

import logging
import socket
import struct
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from dnslib import RR, DNSRecord

from ..events import EventEmitter, Subscription

logger = logging.getLogger(__name__)

MDNS_GROUP = "224.0.0.251"
MDNS_PORT = 5353

# Large enough for any mDNS datagram on a jumbo-frame link.
_RECV_BUFSIZE = 9000


class TransportError(Exception):
    """
    Brief: mDNS multicast transport error.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """

    pass


@dataclass
class MdnsPacket:
    """Brief: Resource records of one inbound mDNS response.

    Inputs:
      - answers: Records in packet order.
      - source: Optional (host, port) of the sender.

    Outputs:
      - MdnsPacket instance.
    """

    answers: List[RR] = field(default_factory=list)
    source: Optional[Tuple[str, int]] = None

    @classmethod
    def from_record(
        cls,
        record: DNSRecord,
        *,
        include_additionals: bool = True,
        source: Optional[Tuple[str, int]] = None,
    ) -> "MdnsPacket":
        """Brief: Flatten a parsed DNSRecord into an MdnsPacket.

        Inputs:
          - record: Parsed dnslib DNSRecord.
          - include_additionals: When True, additional-section records follow
            the answer records. Responders commonly place SRV/TXT/A there
            when replying to a PTR question.
          - source: Optional sender address.

        Outputs:
          - MdnsPacket.
        """

        answers = list(record.rr)
        if include_additionals:
            answers.extend(record.ar)
        return cls(answers=answers, source=source)


def build_ptr_query(service_type: str) -> bytes:
    """Brief: Wire-format PTR question for service_type with mDNS id 0."""

    q = DNSRecord.question(service_type, "PTR")
    q.header.id = 0
    return q.pack()


class MulticastTransport:
    """Brief: Own one IPv4 multicast socket joined to the mDNS group.

    Inputs:
      - group: Multicast group address (default 224.0.0.251).
      - port: UDP port (default 5353).
      - bind_address: Local address to bind and join on ("" for any).
      - ttl: Multicast TTL for outgoing queries.
      - include_additionals: Forwarded to MdnsPacket.from_record().
      - recv_timeout: Receive poll interval in seconds; bounds how long
        close() waits for the receive thread.
      - socket_factory: Callable creating the socket (tests inject fakes).

    Outputs:
      - MulticastTransport instance.
    """

    def __init__(
        self,
        group: str = MDNS_GROUP,
        port: int = MDNS_PORT,
        bind_address: str = "",
        ttl: int = 255,
        include_additionals: bool = True,
        recv_timeout: float = 0.5,
        socket_factory: Callable[..., Any] = socket.socket,
    ) -> None:
        self.group = group
        self.port = int(port)
        self.bind_address = bind_address
        self.ttl = int(ttl)
        self.include_additionals = bool(include_additionals)
        self.recv_timeout = float(recv_timeout)
        self._socket_factory = socket_factory

        self._packets: EventEmitter[MdnsPacket] = EventEmitter("mdns-packet")
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._sock: Any = None
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listener_count(self) -> int:
        return self._packets.listener_count

    def subscribe(self, listener: Callable[[MdnsPacket], None]) -> Subscription:
        return self._packets.subscribe(listener)

    def query(self, service_type: str) -> None:
        """Brief: Send one PTR question for service_type to the mDNS group.

        Inputs:
          - service_type: DNS-SD service type (e.g. ``_dapr._tcp.local``).

        Outputs:
          - None once the datagram has been handed to the OS.

        Raises:
          - TransportError when the transport is closed, service_type cannot
            be encoded as a DNS name, the socket cannot be bound, or the
            send fails.
        """

        try:
            payload = build_ptr_query(service_type)
        except Exception as e:
            # dnslib rejects over-long labels with UnicodeError / DNSLabelError.
            raise TransportError(f"cannot encode PTR query for {service_type!r}: {e}") from e
        with self._lock:
            if self._closed:
                raise TransportError("transport is closed")
            sock = self._ensure_open()
            try:
                sock.sendto(payload, (self.group, self.port))
            except OSError as e:
                raise TransportError(f"mDNS query send failed: {e}") from e
        logger.debug("Sent PTR query for %s to %s:%s", service_type, self.group, self.port)

    def _ensure_open(self) -> Any:
        if self._sock is not None:
            return self._sock

        try:
            sock = self._socket_factory(
                socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP
            )
        except OSError as e:
            raise TransportError(f"mDNS socket creation failed: {e}") from e

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if hasattr(socket, "SO_REUSEPORT"):
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
            sock.bind((self.bind_address, self.port))
            mreq = struct.pack(
                "4s4s",
                socket.inet_aton(self.group),
                socket.inet_aton(self.bind_address or "0.0.0.0"),
            )
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.ttl)
            sock.settimeout(self.recv_timeout)
        except OSError as e:
            sock.close()
            raise TransportError(
                f"mDNS socket bind to {self.group}:{self.port} failed: {e}"
            ) from e

        self._sock = sock
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(sock,),
            name="MdnsReceive",
            daemon=True,
        )
        self._thread.start()
        logger.info("Joined mDNS group %s:%s", self.group, self.port)
        return sock

    def _run_loop(self, sock: Any) -> None:
        while not self._stop_event.is_set():
            try:
                data, addr = sock.recvfrom(_RECV_BUFSIZE)
            except socket.timeout:
                continue
            except OSError:
                if not self._stop_event.is_set():
                    logger.warning("mDNS receive failed; stopping receive loop", exc_info=True)
                return
            self.dispatch(data, addr)

    def dispatch(self, data: bytes, source: Optional[Tuple[str, int]] = None) -> bool:
        """Brief: Parse one datagram and deliver it to listeners when relevant.

        Inputs:
          - data: Raw datagram bytes.
          - source: Optional sender address.

        Outputs:
          - bool: True when the datagram was a DNS response and was delivered;
            False when it was a query or could not be parsed.
        """

        try:
            record = DNSRecord.parse(data)
        except Exception as e:
            logger.debug("Dropping unparseable mDNS datagram from %s: %s", source, e)
            return False

        if not record.header.qr:
            return False

        packet = MdnsPacket.from_record(
            record, include_additionals=self.include_additionals, source=source
        )
        self._packets.fire(packet)
        return True

    def close(self) -> None:
        """Brief: Release the socket after detaching every listener.

        Inputs:
          - None.

        Outputs:
          - None. Idempotent.
        """

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._packets.dispose()
            self._stop_event.set()
            sock, self._sock = self._sock, None
            thread, self._thread = self._thread, None

        if sock is not None:
            try:
                sock.close()
            except OSError:
                logger.debug("Error closing mDNS socket", exc_info=True)
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.recv_timeout * 2 + 1.0)
        logger.info("mDNS transport closed")
