"""mDNS/DNS-SD discovery: record classification, registry, transport and client."""

from .client import ClientClosedError, MdnsClient, QueryError
from .registry import ServiceRecord, ServiceRegistry
from .transport import MdnsPacket, MulticastTransport, TransportError

__all__ = [
    "ClientClosedError",
    "MdnsClient",
    "MdnsPacket",
    "MulticastTransport",
    "QueryError",
    "ServiceRecord",
    "ServiceRegistry",
    "TransportError",
]
