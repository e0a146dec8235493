"""
Brief: Global pytest configuration: src on sys.path, per-test 10s timeout and
shared DNS packet builders.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import sys
from typing import Iterable, List, Optional

import pytest
from dnslib import QTYPE, RR, A, DNSHeader, DNSRecord, PTR, SRV, TXT

# Ensure 'src' is on sys.path so 'daprlens' package is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from daprlens.mdns.transport import MdnsPacket  # noqa: E402

SERVICE_TYPE = "_dapr._tcp.local"


def _alarm_handler(signum, frame):
    """
    Brief: Signal handler that raises TimeoutError when alarm triggers.

    Inputs:
      - signum: signal number (int)
      - frame: current frame (ignored)

    Outputs:
      - None: Raises TimeoutError to fail the test
    """
    raise TimeoutError("Test exceeded 10 seconds")


# Install handler if supported on this platform
if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        # Fallback: no-op on platforms without SIGALRM
        yield


def ptr_rr(target: str, ttl: int = 120, owner: str = SERVICE_TYPE) -> RR:
    return RR(owner, QTYPE.PTR, rdata=PTR(target), ttl=ttl)


def srv_rr(owner: str, target: str, port: int, ttl: int = 120) -> RR:
    return RR(owner, QTYPE.SRV, rdata=SRV(priority=0, weight=0, port=port, target=target), ttl=ttl)


def txt_rr(owner: str, entries: List[str], ttl: int = 120) -> RR:
    return RR(owner, QTYPE.TXT, rdata=TXT(entries), ttl=ttl)


def a_rr(owner: str, address: str, ttl: int = 120) -> RR:
    return RR(owner, QTYPE.A, rdata=A(address), ttl=ttl)


def service_records(
    name: str = "svcA",
    *,
    host: str = "host.local",
    port: int = 50001,
    text: Optional[List[str]] = None,
    address: Optional[str] = "10.0.0.5",
    ttl: int = 120,
) -> List[RR]:
    """
    Brief: PTR/SRV/TXT/A set advertising one Dapr instance.

    Inputs:
      - name: instance name (PTR target)
      - host/port: SRV target and port
      - text: TXT entries (default appId=myapp, httpPort=3501)
      - address: A record for host (None to omit)
      - ttl: PTR TTL

    Outputs:
      - list[RR]
    """
    rrs = [
        ptr_rr(name, ttl=ttl),
        srv_rr(name, host, port),
        txt_rr(name, text if text is not None else ["appId=myapp", "httpPort=3501"]),
    ]
    if address is not None:
        rrs.append(a_rr(host, address))
    return rrs


def packet(*groups: Iterable[RR]) -> MdnsPacket:
    answers: List[RR] = []
    for group in groups:
        if isinstance(group, RR):
            answers.append(group)
        else:
            answers.extend(group)
    return MdnsPacket(answers=answers)


def response_wire(
    answers: Iterable[RR], additionals: Iterable[RR] = ()
) -> bytes:
    """Brief: Pack records into a wire-format mDNS response (QR=1, AA=1)."""
    record = DNSRecord(DNSHeader(id=0, qr=1, aa=1, ra=0))
    for rr in answers:
        record.add_answer(rr)
    for rr in additionals:
        record.add_ar(rr)
    return record.pack()


@pytest.fixture
def dns():
    """
    Brief: Expose the packet builders above to tests as a namespace.

    Inputs:
      - None

    Outputs:
      - SimpleNamespace of builder callables and SERVICE_TYPE
    """
    from types import SimpleNamespace

    return SimpleNamespace(
        SERVICE_TYPE=SERVICE_TYPE,
        ptr=ptr_rr,
        srv=srv_rr,
        txt=txt_rr,
        a=a_rr,
        service=service_records,
        packet=packet,
        wire=response_wire,
    )
